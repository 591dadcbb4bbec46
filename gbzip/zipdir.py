"""
目录压缩

功能：
1. 深度优先（先序）遍历目录，保留相对路径、权限与修改时间
2. 文件名按指定字符集（UTF-8 / GBK）写入压缩包
3. 压缩包位于被压缩目录内时，不会把压缩包自身打包进去
4. 先写入同目录下的临时文件，成功后再替换为目标文件

使用示例：
gbzip -c GBK ./proj proj.zip
"""
import os
import shutil
import stat
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Set, Tuple, Union

from gbzip.charset import UTF8_FLAG, Transcoder
from gbzip.config import Config

PathLike = Union[str, Path]


@dataclass(frozen=True)
class FilesystemEntry:
    """遍历得到的一个文件或目录"""

    path: Path
    name: str  # 压缩包内的相对路径，以 / 分隔
    st: os.stat_result

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.st.st_mode)


class EncodedZipInfo(zipfile.ZipInfo):
    """文件名以转换后的字节写入的 ZipInfo"""

    __slots__ = ("encoded_name", "utf8_flag")

    def _encodeFilenameFlags(self):
        flag_bits = self.flag_bits & ~UTF8_FLAG
        if self.utf8_flag and not self.encoded_name.isascii():
            flag_bits |= UTF8_FLAG
        return self.encoded_name, flag_bits


def default_destination(source: PathLike) -> Path:
    """未指定压缩包路径时，在当前目录下生成 <目录名>.zip"""
    return Path(os.path.basename(os.path.abspath(source)) + ".zip")


def walk(source: PathLike) -> Iterator[FilesystemEntry]:
    """先序遍历 source，子项按目录读取顺序返回（不排序）"""
    root = Path(source)
    yield from _walk(root, os.path.basename(os.path.abspath(root)))


def _walk(path: Path, name: str) -> Iterator[FilesystemEntry]:
    entry = FilesystemEntry(path, name, os.stat(path))
    if name:
        yield entry
    if not entry.is_dir:
        return
    # 先读完目录再递归，避免同时打开过多目录句柄
    with os.scandir(path) as it:
        children = [child.name for child in it]
    for child in children:
        yield from _walk(path / child, f"{name}/{child}" if name else child)


def _identity(st: os.stat_result) -> Tuple[int, int]:
    return st.st_dev, st.st_ino


def _zip_info(entry: FilesystemEntry, transcoder: Transcoder) -> EncodedZipInfo:
    info = EncodedZipInfo.from_file(entry.path, entry.name, strict_timestamps=False)
    info.encoded_name = transcoder.encode(info.filename)
    info.utf8_flag = transcoder.utf8_flag
    if not entry.is_dir:
        info.compress_type = zipfile.ZIP_DEFLATED
    return info


def write_entry(zf: zipfile.ZipFile, entry: FilesystemEntry, transcoder: Transcoder) -> zipfile.ZipInfo:
    """写入一个条目：目录只写头部，文件写头部和内容"""
    info = _zip_info(entry, transcoder)
    if entry.is_dir:
        zf.writestr(info, b"")
        return info
    with open(entry.path, "rb") as src, zf.open(info, "w") as dst:
        shutil.copyfileobj(src, dst)
    return info


def archive(source: PathLike, destination: PathLike, config: Config) -> List[str]:
    """把 source 压缩到 destination，返回写入的条目名"""
    transcoder = config.transcoder
    destination = Path(os.path.abspath(destination))

    skip: Set[Tuple[int, int]] = set()
    mode = 0o644
    if destination.exists():
        st = os.stat(destination)
        skip.add(_identity(st))
        mode = stat.S_IMODE(st.st_mode)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
    )
    names = []
    try:
        with os.fdopen(fd, "wb") as fp:
            skip.add(_identity(os.fstat(fp.fileno())))
            with zipfile.ZipFile(fp, "w") as zf:
                for entry in walk(source):
                    if _identity(entry.st) in skip:
                        continue
                    if config.verbose:
                        print(f"Add {entry.path}")
                    names.append(write_entry(zf, entry, transcoder).filename)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, destination)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return names
