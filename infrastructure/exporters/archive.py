import io
import zipfile

from core.entities import GeneratedCodebase


def package_codebase(codebase: GeneratedCodebase) -> bytes:
    """Zip every generated file under a top-level directory named after the project"""
    buffer = io.BytesIO()

    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for build_file in codebase.build_files:
            archive.writestr(f"{codebase.name}/{build_file.path}", build_file.content)

    return buffer.getvalue()
