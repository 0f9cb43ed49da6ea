from datetime import datetime
from typing import List

from core.config import CodebaseConfig
from core.entities import BuildSystem, CodebaseStats, DependencyIssue


def issues_report(issues: List[DependencyIssue], timestamp: datetime) -> str:
    """Markdown listing of every injected dependency issue"""
    report = "# Dependency Issues Report\n\n"
    report += f"Generated: {timestamp.isoformat()}\n\n"
    report += f"Total Issues: {len(issues)}\n\n"

    for index, issue in enumerate(issues, start=1):
        report += f"## Issue {index}: {issue.type.value}\n\n"
        report += f"**Description:** {issue.description}\n\n"
        if len(issue.artifacts) > 1:
            report += f"**Affected Artifacts:** {', '.join(issue.artifacts)}\n\n"
        elif issue.artifacts:
            report += f"**Artifact:** {issue.artifacts[0]}\n\n"
        if issue.missing:
            report += f"**Missing Reference:** {issue.missing}\n\n"
        report += "---\n\n"

    return report


def readme(config: CodebaseConfig, stats: CodebaseStats) -> str:
    if config.build_system is BuildSystem.MAKE:
        instructions = "```bash\nmake\n```"
    else:
        instructions = "```bash\nmkdir build && cd build\ncmake ..\nmake\n```"

    languages = ", ".join(f"{lang}: {count}" for lang, count in sorted(stats.modules_by_language.items()))

    return f"""# {config.name}

Generated C/C++ codebase for SBOM/CVE testing.

## Build Instructions

{instructions}

## Statistics

- Total Artifacts: {stats.total_artifacts} ({stats.executables} executables, {stats.libraries} libraries)
- Total Modules: {stats.total_modules} ({languages or 'none'})
- Total Lines: {stats.total_lines}
- Build System: {config.build_system.value.upper()}
- Dependency Complexity: {config.dependency_complexity.value}
- Cross Dependencies: {'Enabled' if config.cross_dependencies.enabled else 'Disabled'}
- Includes Vulnerabilities: {'Yes' if config.include_vulnerabilities else 'No'}
- Injected Issues: {', '.join(i.value for i in config.dependency_issues) or 'None'}

## SBOM

See `sbom.json` for the Software Bill of Materials in CycloneDX format.
"""
