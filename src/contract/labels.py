"""Build-graph labels and target identifier synthesis.

Every dependency target this tool writes goes through ``format_target`` so the
module index, the rule index and the path heuristic agree on one shape:

    <repository>//<package path>:<rule name>

The repository part is used verbatim (``""`` for the main repository,
``"@deps"`` or ``"R"`` for external ones).
"""

from __future__ import annotations

from dataclasses import dataclass

INSTANCE_SUFFIX = "_instance"


def format_target(repository: str, path: str, name: str) -> str:
    """Build a target identifier from repository, package path and rule name.

    Examples:
        >>> format_target("R", "x", "x_instance")
        'R//x:x_instance'
        >>> format_target("", "a/cue.mod/gen/b", "b_instance")
        '//a/cue.mod/gen/b:b_instance'
    """
    return f"{repository}//{path.strip('/')}:{name}"


def instance_name(package_name: str) -> str:
    """Name of the instance rule for a package."""
    return f"{package_name}{INSTANCE_SUFFIX}"


@dataclass(frozen=True)
class Label:
    """A parsed build-graph label."""

    repo: str = ""
    pkg: str = ""
    name: str = ""

    @classmethod
    def parse(cls, value: str) -> Label:
        """Parse ``[repo]//pkg:name`` or a package-relative ``:name``.

        Raises:
            ValueError: If the value has neither ``//`` nor a leading ``:``.
        """
        if value.startswith(":"):
            return cls(name=value[1:])
        if "//" not in value:
            msg = f"invalid label: {value!r}"
            raise ValueError(msg)
        repo, rest = value.split("//", 1)
        if ":" in rest:
            pkg, name = rest.rsplit(":", 1)
        else:
            pkg, name = rest, rest.rsplit("/", 1)[-1]
        return cls(repo=repo, pkg=pkg, name=name)

    def __str__(self) -> str:
        return format_target(self.repo, self.pkg, self.name)

    def rel(self, repo: str, pkg: str) -> Label:
        """Return this label relative to the given repository and package.

        A label in the same repository loses its repository part; a label in
        the same package as well renders as ``:name``.
        """
        if self.repo != repo:
            return self
        if self.pkg == pkg:
            return _RelativeLabel(name=self.name)
        return Label(pkg=self.pkg, name=self.name)

    def parent(self) -> Label:
        """Label with the same name one package level up."""
        if "/" not in self.pkg:
            return Label(repo=self.repo, pkg="", name=self.name)
        return Label(repo=self.repo, pkg=self.pkg.rsplit("/", 1)[0], name=self.name)


@dataclass(frozen=True)
class _RelativeLabel(Label):
    def __str__(self) -> str:
        return f":{self.name}"


__all__ = ["INSTANCE_SUFFIX", "Label", "format_target", "instance_name"]
