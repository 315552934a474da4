"""CUE standard library packages; imports of these never produce deps."""

from __future__ import annotations

STDLIB_PACKAGES = frozenset(
    {
        "crypto/md5",
        "crypto/sha1",
        "crypto/sha256",
        "crypto/sha512",
        "encoding/base64",
        "encoding/csv",
        "encoding/hex",
        "encoding/json",
        "encoding/yaml",
        "html",
        "list",
        "math",
        "math/bits",
        "net",
        "path",
        "regexp",
        "strconv",
        "strings",
        "struct",
        "text/tabwriter",
        "text/template",
        "time",
        "tool",
        "tool/cli",
        "tool/exec",
        "tool/file",
        "tool/http",
        "tool/os",
        # Added in CUE v0.12.
        "crypto/hmac",
        "encoding/binary",
        "encoding/pem",
        "io",
        "math/rand",
        "net/url",
        "path/filepath",
        "uuid",
    }
)


def is_stdlib(import_path: str) -> bool:
    return import_path in STDLIB_PACKAGES


__all__ = ["STDLIB_PACKAGES", "is_stdlib"]
