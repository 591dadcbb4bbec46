"""
zip 压缩包解压

功能：
1. 按压缩包目录中的顺序解压全部条目，保留目录结构与权限
2. 按指定字符集（UTF-8 / GBK）还原条目文件名
3. 拒绝绝对路径和包含 .. 的条目，防止写到目标目录之外
4. 压缩包可以来自文件，也可以来自标准输入

使用示例：
gbzip -x -c GBK -d ./unzipped 文书.zip
"""
import io
import os
import shutil
import zipfile
import zlib
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import BinaryIO, List, Tuple, Union

from pathvalidate import sanitize_filename

from gbzip.config import Config
from gbzip.errors import ArchiveFormatError, UnsafeEntryError

DEFAULT_DIR_MODE = 0o777
DEFAULT_FILE_MODE = 0o666

# 读取损坏的压缩包时 zipfile 可能抛出的异常
_FORMAT_ERRORS = (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, ValueError, EOFError)


def safe_entry_path(name: str) -> PurePosixPath:
    """把条目名规范为目标目录下的相对路径"""
    path = name.replace("\\", "/")
    if "\x00" in path:
        raise UnsafeEntryError(name, "包含空字符")
    if path.startswith("/") or PureWindowsPath(path).drive:
        raise UnsafeEntryError(name, "绝对路径")

    parts = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            raise UnsafeEntryError(name)
        safe_part = sanitize_filename(part, platform="auto")
        if not safe_part:
            raise UnsafeEntryError(name, "文件名无效")
        parts.append(safe_part)

    if not parts:
        raise UnsafeEntryError(name, "空路径")
    return PurePosixPath(*parts)


def entry_mode(info: zipfile.ZipInfo, is_dir: bool) -> int:
    """条目保存的权限位；没有保存时（如 DOS 创建的压缩包）使用默认值"""
    mode = (info.external_attr >> 16) & 0o777
    if is_dir:
        # 目录需要可写，否则无法写入其中的文件
        return (mode or DEFAULT_DIR_MODE) | 0o700
    return mode or DEFAULT_FILE_MODE


def read_archive(stream: BinaryIO) -> zipfile.ZipFile:
    """把整个压缩包读入内存后打开"""
    data = stream.read()
    try:
        return zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, NotImplementedError, ValueError, EOFError) as e:
        raise ArchiveFormatError(f"不是合法的 zip 压缩包: {e}") from e


def _plan(zf: zipfile.ZipFile, config: Config) -> List[Tuple[zipfile.ZipInfo, Path, bool]]:
    transcoder = config.transcoder
    dest = Path(config.dest_dir)
    plan = []
    for info in zf.infolist():
        # 以还原后的完整文件名判断目录，info.filename 在空字符处会被截断
        name = transcoder.entry_name(info)
        target = dest.joinpath(*safe_entry_path(name).parts)
        plan.append((info, target, name.replace("\\", "/").endswith("/")))
    return plan


def _write_file(zf: zipfile.ZipFile, info: zipfile.ZipInfo, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_BINARY", 0)
    fd = os.open(target, flags, entry_mode(info, False))
    with os.fdopen(fd, "wb") as dst:
        try:
            with zf.open(info) as src:
                shutil.copyfileobj(src, dst)
        except _FORMAT_ERRORS as e:
            raise ArchiveFormatError(f"无法读取条目 {info.orig_filename!r}: {e}") from e


def extract_zip(zf: zipfile.ZipFile, config: Config) -> List[Path]:
    """解压已打开的压缩包，返回写入的路径"""
    # 先检查全部条目名，有问题时不写入任何文件
    plan = _plan(zf, config)
    Path(config.dest_dir).mkdir(parents=True, exist_ok=True)

    written = []
    for info, target, is_dir in plan:
        if is_dir:
            if config.verbose:
                print(f"Create directory: {target}")
            os.makedirs(target, entry_mode(info, True), exist_ok=True)
        else:
            if config.verbose:
                print(f"Write to file: {target}")
            _write_file(zf, info, target)
        written.append(target)
    return written


def extract(source: Union[str, Path, BinaryIO], config: Config) -> List[Path]:
    """解压 source（文件路径或二进制流）到 config.dest_dir"""
    if config.verbose:
        print(f"Charset: {config.encoding}")
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as f:
            zf = read_archive(f)
    else:
        zf = read_archive(source)
    with zf:
        return extract_zip(zf, config)
