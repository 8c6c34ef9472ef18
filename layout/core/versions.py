"""Manifest version constraints.

Constraints follow the usual semantic-version notation::

    >= 1.2.0, < 2        all comparisons must hold
    ^1.4                 >=1.4.0, <2.0.0
    ~1.4.2               >=1.4.2, <1.5.0
    1.2.x                any 1.2 patch release
    <1 || >=3            either side may hold
"""
import re
from typing import List

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from layout.core.errors import ManifestError

_TOKEN = re.compile(r"(\^|~>|~|>=|<=|!=|==|=|>|<)?\s*v?(\d[0-9A-Za-z.\-+*]*)")


def parse_version(value: str) -> Version:
    """Parse ``value`` (leading ``v`` allowed) as a version.

    Raises:
        ManifestError: If the value is not a version
    """
    try:
        return Version(value.strip().lstrip("vV"))
    except InvalidVersion as exc:
        raise ManifestError(f"parse version {value!r}: {exc}") from exc


def _release(version: str) -> List[int]:
    parts = []
    for part in version.split("."):
        if not part.isdigit():
            break
        parts.append(int(part))
    return parts or [0]


def _caret(version: str) -> List[str]:
    release = _release(version)
    major, minor, patch = (release + [0, 0])[:3]
    if major > 0 or len(release) == 1:
        upper = f"{major + 1}.0.0"
    elif minor > 0 or len(release) == 2:
        upper = f"0.{minor + 1}.0"
    else:
        upper = f"0.0.{patch + 1}"
    return [f">={version}", f"<{upper}"]


def _tilde(version: str) -> List[str]:
    release = _release(version)
    if len(release) == 1:
        upper = f"{release[0] + 1}.0.0"
    else:
        upper = f"{release[0]}.{release[1] + 1}.0"
    return [f">={version}", f"<{upper}"]


def _specifiers(alternative: str) -> SpecifierSet:
    specs: List[str] = []
    for op, version in _TOKEN.findall(alternative):
        wildcard = version.replace("x", "*").replace("X", "*")
        if op == "^":
            specs.extend(_caret(version))
        elif op in ("~", "~>"):
            specs.extend(_tilde(version))
        elif op in ("", "=", "=="):
            specs.append(f"=={wildcard.rstrip('.*')}.*" if "*" in wildcard else f"=={version}")
        else:
            specs.append(f"{op}{version}")
    try:
        return SpecifierSet(",".join(specs), prereleases=True)
    except InvalidSpecifier as exc:
        raise ManifestError(f"parse version constraint {alternative!r}: {exc}") from exc


def satisfies(constraint: str, current: str) -> bool:
    """Check ``current`` against ``constraint``.

    An empty constraint or an empty current version always passes.

    Raises:
        ManifestError: If either side cannot be parsed
    """
    if not constraint or not constraint.strip() or not current or not current.strip():
        return True

    version = parse_version(current)
    for alternative in constraint.split("||"):
        if not alternative.strip():
            continue
        if alternative.strip() in ("*", "x", "X"):
            return True
        if not _TOKEN.search(alternative):
            raise ManifestError(f"parse version constraint {alternative!r}")
        if _specifiers(alternative).contains(version, prereleases=True):
            return True
    return False
