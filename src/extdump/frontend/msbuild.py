"""Solution and project file readers.

Just enough of MSBuild evaluation to find out what a project compiles:
property groups with simple conditions, ``$(Property)`` expansion,
``Compile`` and ``ProjectReference`` items, and the SDK's default compile
glob.  Targets, imports and NuGet restore are out of reach; a project whose
shape depends on them is read as far as its own file goes.
"""

from __future__ import annotations

import logging
import os
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

log = logging.getLogger(__name__)

PROJECT_LANGUAGES = {
    ".csproj": "C#",
    ".vbproj": "Visual Basic",
    ".fsproj": "F#",
}

_SLN_PROJECT_RE = re.compile(
    r'^Project\("\{(?P<type>[^}]+)\}"\)\s*=\s*"(?P<name>[^"]*)"\s*,\s*"(?P<path>[^"]*)"\s*,\s*"\{(?P<guid>[^}]+)\}"',
    re.MULTILINE,
)
_PROPERTY_RE = re.compile(r"\$\(([A-Za-z_][A-Za-z0-9_.\-]*)\)")
_COMPARISON_RE = re.compile(r"^\s*'(?P<left>[^']*)'\s*(?P<op>==|!=)\s*'(?P<right>[^']*)'\s*$")
_EXISTS_RE = re.compile(r"^\s*(?P<neg>!)?\s*Exists\(\s*'(?P<path>[^']*)'\s*\)\s*$", re.IGNORECASE)
_BOOLEAN_SPLIT_RE = re.compile(r"\s+(and|or)\s+", re.IGNORECASE)

_DEFAULT_EXCLUDED_DIRS = {"bin", "obj"}


class ProjectLoadError(Exception):
    """A solution or project file could not be read."""

    def __init__(self, path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = str(path)


def normalize_path(path: str, base: str | Path) -> str:
    """Resolve an MSBuild-style (possibly backslashed) path against *base*."""
    path = path.strip().replace("\\", "/")
    return os.path.normpath(os.path.join(str(base), path))


# ---------------------------------------------------------------------------
# Solutions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SolutionEntry:
    name: str
    path: str
    project_type: str = ""
    guid: str = ""


def read_solution(path: str | Path) -> list[SolutionEntry]:
    """List the project entries of a ``.sln`` or ``.slnx`` file.

    Solution folders and anything that is not a known project file are
    dropped.  Paths come back absolute.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise ProjectLoadError(path, exc.strerror or str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise ProjectLoadError(path, f"not UTF-8 text: {exc.reason} at byte {exc.start}") from exc

    base = path.parent
    entries = []
    if path.suffix.lower() == ".slnx":
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise ProjectLoadError(path, f"invalid solution XML: {exc}") from exc
        for element in root.iter():
            if _local_name(element.tag) == "Project" and element.get("Path"):
                project_path = normalize_path(element.get("Path"), base)
                entries.append(SolutionEntry(Path(project_path).stem, project_path))
    else:
        for match in _SLN_PROJECT_RE.finditer(text):
            project_path = normalize_path(match.group("path"), base)
            entries.append(SolutionEntry(
                match.group("name"), project_path, match.group("type").upper(), match.group("guid").upper(),
            ))

    return [e for e in entries if Path(e.path).suffix.lower() in PROJECT_LANGUAGES]


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


@dataclass
class ProjectFile:
    """One evaluation of a project file for one set of global properties."""

    path: str
    language: str
    properties: dict[str, str] = field(default_factory=dict)
    compile_items: list[str] = field(default_factory=list)
    project_references: list[str] = field(default_factory=list)
    is_sdk_style: bool = True

    def get(self, name: str, default: str = "") -> str:
        return self.properties.get(name.lower(), default)

    def is_true(self, name: str, default: bool = False) -> bool:
        value = self.get(name)
        if not value:
            return default
        return value.strip().lower() in ("true", "enable", "enabled")

    @property
    def directory(self) -> str:
        return os.path.dirname(self.path)

    @property
    def assembly_name(self) -> str:
        return self.get("AssemblyName") or Path(self.path).stem

    @property
    def target_frameworks(self) -> list[str]:
        multi = self.get("TargetFrameworks")
        if multi:
            return [tfm.strip() for tfm in multi.split(";") if tfm.strip()]
        single = self.get("TargetFramework")
        if single:
            return [single.strip()]
        legacy = self.get("TargetFrameworkVersion")
        if legacy:
            return ["net" + legacy.strip().lstrip("vV").replace(".", "")]
        return []

    @property
    def target_framework(self) -> str:
        return self.get("TargetFramework").strip()

    @property
    def version(self) -> str:
        version = self.get("AssemblyVersion") or self.get("Version") or "1.0.0.0"
        # Prerelease/build metadata is not part of an assembly version.
        version = re.split(r"[-+]", version, maxsplit=1)[0]
        parts = [p for p in version.split(".") if p]
        while len(parts) < 4:
            parts.append("0")
        return ".".join(parts[:4])

    @property
    def implicit_usings(self) -> bool:
        return self.is_true("ImplicitUsings")

    @property
    def output_directory(self) -> str:
        output = self.get("OutputPath")
        if not output:
            base = (self.get("BaseOutputPath") or "bin").replace("\\", "/").rstrip("/")
            output = f"{base}/{self.get('Configuration', 'Debug')}/"
            tfm = self.target_framework
            if self.is_sdk_style and tfm and self.is_true("AppendTargetFrameworkToOutputPath", default=True):
                output += f"{tfm}/"
        return normalize_path(output, self.directory)

    @property
    def output_file_path(self) -> str:
        output_type = self.get("OutputType").lower()
        framework = self.target_framework or next(iter(self.target_frameworks), "")
        extension = ".dll"
        if output_type in ("exe", "winexe") and framework.startswith("net4"):
            extension = ".exe"
        return os.path.join(self.output_directory, self.assembly_name + extension)


def read_project(
    path: str | Path,
    configuration: str = "Debug",
    target_framework: str | None = None,
) -> ProjectFile:
    """Evaluate the project at *path*.

    Raises ``ProjectLoadError`` when the file is missing or is not XML.
    """
    path = os.path.abspath(str(path))
    try:
        root = ET.parse(path).getroot()
    except OSError as exc:
        raise ProjectLoadError(path, exc.strerror or str(exc)) from exc
    except ET.ParseError as exc:
        raise ProjectLoadError(path, f"invalid project XML: {exc}") from exc

    if _local_name(root.tag) != "Project":
        raise ProjectLoadError(path, f"root element is <{_local_name(root.tag)}>, expected <Project>")

    project_dir = os.path.dirname(path)
    properties = {
        "configuration": configuration,
        "platform": "AnyCPU",
        "msbuildprojectdirectory": project_dir,
        "msbuildprojectfile": os.path.basename(path),
        "msbuildprojectname": Path(path).stem,
        "msbuildprojectextension": Path(path).suffix,
    }
    if target_framework:
        properties["targetframework"] = target_framework

    is_sdk_style = bool(root.get("Sdk")) or any(_local_name(e.tag) == "Sdk" for e in root)
    project = ProjectFile(
        path=path,
        language=PROJECT_LANGUAGES.get(Path(path).suffix.lower(), "Unknown"),
        properties=properties,
        is_sdk_style=is_sdk_style,
    )

    # Properties first, as MSBuild's evaluation does, then items.
    for group in root:
        if _local_name(group.tag) != "PropertyGroup" or not _condition_holds(group, properties, project_dir):
            continue
        for element in group:
            if not isinstance(element.tag, str) or not _condition_holds(element, properties, project_dir):
                continue
            name = _local_name(element.tag).lower()
            # Global properties win over project properties.
            if name == "targetframework" and target_framework:
                continue
            properties[name] = _expand(element.text or "", properties).strip()

    compile_includes: list[str] = []
    compile_removes: set[str] = set()
    for group in root:
        if _local_name(group.tag) != "ItemGroup" or not _condition_holds(group, properties, project_dir):
            continue
        for item in group:
            if not isinstance(item.tag, str) or not _condition_holds(item, properties, project_dir):
                continue
            kind = _local_name(item.tag)
            if kind == "Compile":
                if item.get("Include"):
                    compile_includes.extend(_expand_items(item.get("Include"), properties, project_dir))
                if item.get("Remove"):
                    compile_removes.update(_expand_items(item.get("Remove"), properties, project_dir))
            elif kind == "ProjectReference" and item.get("Include"):
                for reference in _expand(item.get("Include"), properties).split(";"):
                    if reference.strip():
                        project.project_references.append(normalize_path(reference, project_dir))

    files: list[str] = []
    if is_sdk_style and project.is_true("EnableDefaultCompileItems", default=True):
        files.extend(_default_compile_items(project_dir, project))
    files.extend(compile_includes)

    seen = set()
    for file_path in files:
        key = os.path.normcase(file_path)
        if key in seen or file_path in compile_removes:
            continue
        seen.add(key)
        project.compile_items.append(file_path)

    log.debug(
        "Evaluated %s (%s): %d compile item(s), %d project reference(s)",
        path, target_framework or "no target framework",
        len(project.compile_items), len(project.project_references),
    )
    return project


# ---------------------------------------------------------------------------
# Evaluation helpers
# ---------------------------------------------------------------------------


def _local_name(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _expand(text: str, properties: dict[str, str]) -> str:
    return _PROPERTY_RE.sub(lambda m: properties.get(m.group(1).lower(), ""), text)


def _condition_holds(element, properties: dict[str, str], project_dir: str) -> bool:
    condition = element.get("Condition")
    if not condition or not condition.strip():
        return True
    return _evaluate_condition(_expand(condition, properties), project_dir)


def _evaluate_condition(condition: str, project_dir: str) -> bool:
    """Evaluate ``'a' == 'b'`` comparisons joined by ``and``/``or``.

    Parentheses around the whole condition are accepted.  Anything more
    complex evaluates to True, so the element is kept.
    """
    condition = condition.strip()
    while condition.startswith("(") and condition.endswith(")"):
        condition = condition[1:-1].strip()

    tokens = _BOOLEAN_SPLIT_RE.split(condition)
    result = _evaluate_term(tokens[0], project_dir)
    for index in range(1, len(tokens) - 1, 2):
        operator = tokens[index].lower()
        value = _evaluate_term(tokens[index + 1], project_dir)
        result = (result and value) if operator == "and" else (result or value)
    return result


def _evaluate_term(term: str, project_dir: str) -> bool:
    term = term.strip().strip("()").strip()
    match = _COMPARISON_RE.match(term)
    if match:
        equal = match.group("left").strip().lower() == match.group("right").strip().lower()
        return equal if match.group("op") == "==" else not equal
    match = _EXISTS_RE.match(term)
    if match:
        exists = os.path.exists(normalize_path(match.group("path"), project_dir))
        return not exists if match.group("neg") else exists
    lowered = term.lower().strip("'")
    if lowered in ("true", "false"):
        return lowered == "true"
    log.debug("Cannot evaluate condition %r; assuming true", term)
    return True


def _expand_items(value: str, properties: dict[str, str], project_dir: str) -> list[str]:
    items = []
    for part in _expand(value, properties).split(";"):
        part = part.strip().replace("\\", "/")
        if not part:
            continue
        if any(ch in part for ch in "*?"):
            items.extend(
                os.path.normpath(str(p)) for p in sorted(Path(project_dir).glob(part)) if p.is_file()
            )
        else:
            items.append(normalize_path(part, project_dir))
    return items


def _default_compile_items(project_dir: str, project: ProjectFile) -> list[str]:
    excluded = set(_DEFAULT_EXCLUDED_DIRS)
    for name in ("BaseOutputPath", "BaseIntermediateOutputPath"):
        value = project.get(name).replace("\\", "/").strip("/")
        if value:
            excluded.add(value.split("/")[0].lower())

    items = []
    for dirpath, dirnames, filenames in os.walk(project_dir):
        if dirpath == project_dir:
            dirnames[:] = [d for d in dirnames if d.lower() not in excluded]
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for filename in sorted(filenames):
            if filename.lower().endswith(".cs"):
                items.append(os.path.join(dirpath, filename))
    return items
