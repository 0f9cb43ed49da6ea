import posixpath
from typing import List

from core.entities import Artifact, ArtifactIndex, ArtifactType, BuildFile, Language
from core.interface import IBuildFileGenerator


def relative_dir(source: Artifact, target: Artifact) -> str:
    return posixpath.relpath(target.path, source.path)


def linkable_dependencies(artifact: Artifact, index: ArtifactIndex) -> List[Artifact]:
    """Resolved dependencies that produce a library; executables cannot be linked against"""
    return [d for d in index.resolved_dependencies(artifact) if d.type is not ArtifactType.EXECUTABLE]


class MakeBuildGenerator(IBuildFileGenerator):
    """Adapter: root aggregator Makefile plus one Makefile per artifact"""

    def generate(self, artifacts: List[Artifact], project_name: str) -> List[BuildFile]:
        index = ArtifactIndex(artifacts)
        files = [BuildFile(name="Makefile", path="Makefile", content=self.root_makefile(index, project_name))]

        for artifact in index:
            files.append(BuildFile(
                name="Makefile",
                path=f"{artifact.path}/Makefile",
                content=self.artifact_makefile(artifact, index)
            ))

        return files

    def root_makefile(self, index: ArtifactIndex, project_name: str) -> str:
        # Creation order already puts dependencies first; prerequisites cover injected edges
        subdirs = list(dict.fromkeys(a.path for a in index))
        lines = [
            f"# Root Makefile for {project_name}",
            f".PHONY: all clean {' '.join(subdirs)}",
            "",
            f"all: {' '.join(subdirs)}",
            "",
        ]

        for artifact in index:
            prerequisites = [d.path for d in index.resolved_dependencies(artifact) if d.path != artifact.path]
            rule = f"{artifact.path}: {' '.join(prerequisites)}".rstrip()
            lines.append(rule)
            lines.append(f"\t$(MAKE) -C {artifact.path}")
            lines.append("")

        lines.append("clean:")
        lines.extend(f"\t$(MAKE) -C {d} clean" for d in subdirs)
        lines.append("")
        return "\n".join(lines)

    def artifact_makefile(self, artifact: Artifact, index: ArtifactIndex) -> str:
        deps = index.resolved_dependencies(artifact)
        target = artifact.output_name
        uses_cpp = any(m.language is Language.CPP for m in artifact.modules)
        linker = "$(CXX)" if uses_cpp else "$(CC)"

        includes = " ".join(["-I."] + [f"-I{relative_dir(artifact, d)}" for d in deps])
        ldflags = " ".join(f"-L{relative_dir(artifact, d)} -l{d.name}" for d in linkable_dependencies(artifact, index))
        objects = " ".join(f"{m.name}.o" for m in artifact.modules)

        makefile = f"""# Makefile for {artifact.name} ({artifact.type.value})
CC = gcc
CXX = g++
CFLAGS = -Wall -Wextra -fPIC {includes}
CXXFLAGS = -Wall -Wextra -fPIC -std=c++17 {includes}
LDFLAGS = {ldflags}

OBJECTS = {objects}

all: {target}

"""
        if artifact.type is ArtifactType.EXECUTABLE:
            makefile += f"{target}: $(OBJECTS)\n\t{linker} -o $@ $^ $(LDFLAGS)\n\n"
        elif artifact.type is ArtifactType.SHARED_LIB:
            makefile += f"{target}: $(OBJECTS)\n\t{linker} -shared -o $@ $^ $(LDFLAGS)\n\n"
        else:
            makefile += f"{target}: $(OBJECTS)\n\tar rcs $@ $^\n\n"

        for m in artifact.modules:
            if m.language is Language.CPP:
                makefile += f"{m.name}.o: {m.source_filename} {m.header_filename}\n\t$(CXX) $(CXXFLAGS) -c {m.source_filename}\n\n"
            else:
                makefile += f"{m.name}.o: {m.source_filename} {m.header_filename}\n\t$(CC) $(CFLAGS) -c {m.source_filename}\n\n"

        makefile += f"clean:\n\trm -f *.o {target}\n\n.PHONY: all clean\n"
        return makefile


class CMakeBuildGenerator(IBuildFileGenerator):
    """Adapter: root CMakeLists.txt adding one subdirectory per artifact"""

    MINIMUM_VERSION = "3.10"

    def generate(self, artifacts: List[Artifact], project_name: str) -> List[BuildFile]:
        index = ArtifactIndex(artifacts)
        files = [BuildFile(
            name="CMakeLists.txt",
            path="CMakeLists.txt",
            content=self.root_lists(index, project_name)
        )]

        for artifact in index:
            files.append(BuildFile(
                name="CMakeLists.txt",
                path=f"{artifact.path}/CMakeLists.txt",
                content=self.artifact_lists(artifact, index)
            ))

        return files

    def root_lists(self, index: ArtifactIndex, project_name: str) -> str:
        lines = [
            f"cmake_minimum_required(VERSION {self.MINIMUM_VERSION})",
            f"project({project_name} C CXX)",
            "",
            "set(CMAKE_C_STANDARD 99)",
            "set(CMAKE_CXX_STANDARD 17)",
            "",
        ]
        # Subsystem directories contain their components; add each path exactly once from the root
        lines.extend(f"add_subdirectory({a.path} {a.path.replace('/', '_')}_build)" for a in index)
        lines.append("")
        return "\n".join(lines)

    def artifact_lists(self, artifact: Artifact, index: ArtifactIndex) -> str:
        deps = [d.name for d in linkable_dependencies(artifact, index)]
        sources = " ".join(m.source_filename for m in artifact.modules)
        lines = [f"# CMakeLists.txt for {artifact.name} ({artifact.type.value})"]

        if not artifact.modules:
            # Nothing to compile, still usable as a link target
            lines.append(f"add_library({artifact.name} INTERFACE)")
            if deps:
                lines.append(f"target_link_libraries({artifact.name} INTERFACE {' '.join(deps)})")
            lines.append("")
            return "\n".join(lines)

        if artifact.type is ArtifactType.EXECUTABLE:
            lines.append(f"add_executable({artifact.name} {sources})")
        elif artifact.type is ArtifactType.SHARED_LIB:
            lines.append(f"add_library({artifact.name} SHARED {sources})")
        else:
            lines.append(f"add_library({artifact.name} STATIC {sources})")

        lines.append(f"target_include_directories({artifact.name} PUBLIC ${{CMAKE_CURRENT_SOURCE_DIR}})")
        if deps:
            lines.append(f"target_link_libraries({artifact.name} PRIVATE {' '.join(deps)})")
        lines.append("")
        return "\n".join(lines)
