"""Pytest bootstrap: local package imports and a clean gbzip environment."""

import struct
import sys
import zipfile
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ("GBZIP_ENCODING", "GBZIP_DIR", "GBZIP_VERBOSE"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def proj(tmp_path: Path) -> Path:
    """proj/a.txt ("hi") and an empty proj/sub/"""
    root = tmp_path / "proj"
    root.mkdir()
    (root / "a.txt").write_text("hi", encoding="utf-8")
    (root / "sub").mkdir()
    return root


def _write_gbk_zip(path: Path, name: str, data: bytes) -> Path:
    raw = name.encode("gbk")
    placeholder = b"x" * len(raw)
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr(placeholder.decode("ascii"), data)
    content = path.read_bytes()
    # local header + central directory
    assert content.count(placeholder) == 2
    path.write_bytes(content.replace(placeholder, raw))
    return path


@pytest.fixture
def make_gbk_zip():
    """Write a zip whose entry name is stored as raw GBK bytes, no UTF-8 flag."""
    return _write_gbk_zip


def _write_damaged_zip(path: Path, kind: str) -> Path:
    """Two stored entries, good.txt then bad.txt, with one field broken."""
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("good.txt", b"good content")
        zf.writestr("bad.txt", b"bad content")
    data = path.read_bytes()
    buf = bytearray(data)
    first_cd = data.index(b"PK\x01\x02")
    last_cd = data.rindex(b"PK\x01\x02")
    end = data.rindex(b"PK\x05\x06")

    if kind == "crc":
        buf[data.index(b"bad content")] = ord("B")
    elif kind == "version":
        # version needed to extract: 25.5
        buf[first_cd + 6] = 255
    elif kind == "offset":
        (cd_offset,) = struct.unpack_from("<L", data, end + 16)
        struct.pack_into("<L", buf, end + 16, cd_offset + 1000)
    elif kind == "truncated":
        struct.pack_into("<LL", buf, last_cd + 20, 0xFFFFFF, 0xFFFFFF)
    elif kind == "nul":
        buf[first_cd + 46] = 0
    else:
        raise ValueError(kind)
    path.write_bytes(bytes(buf))
    return path


@pytest.fixture
def damaged_zip(tmp_path: Path):
    """Write a broken archive: crc, version, offset, truncated or nul."""
    return lambda kind: _write_damaged_zip(tmp_path / f"{kind}.zip", kind)
