"""
zip 条目文件名的字符集转换

zip 格式本身只保存文件名的原始字节。Windows 中文系统下的压缩软件通常直接写入
GBK 字节，且不设置 UTF-8 标志位（通用标志第 11 位），所以解压时需要按 GBK
还原，压缩时也要写成 GBK，Windows 资源管理器才能正确显示。
"""
import zipfile
from dataclasses import dataclass

from gbzip.errors import TranscodingError, UnsupportedEncoding

UTF8 = "UTF-8"
GBK = "GBK"
SUPPORTED_ENCODINGS = (UTF8, GBK)

# zip 通用标志位第 11 位：文件名与注释为 UTF-8
UTF8_FLAG = 0x800

_ALIASES = {
    "UTF-8": UTF8,
    "UTF8": UTF8,
    "GBK": GBK,
    "CP936": GBK,
}
_CODECS = {UTF8: "utf-8", GBK: "gbk"}


def normalize_encoding(value: str) -> str:
    """把用户输入的字符集名（不区分大小写）规范为 UTF-8 或 GBK"""
    key = (value or "").strip().upper()
    if key not in _ALIASES:
        raise UnsupportedEncoding(value)
    return _ALIASES[key]


@dataclass(frozen=True)
class Transcoder:
    """在 UTF-8 文本与压缩包内文件名字节之间转换"""

    encoding: str = UTF8

    def __post_init__(self) -> None:
        object.__setattr__(self, "encoding", normalize_encoding(self.encoding))

    @property
    def codec(self) -> str:
        return _CODECS[self.encoding]

    @property
    def utf8_flag(self) -> bool:
        """写入的非 ASCII 文件名是否需要带 UTF-8 标志位"""
        return self.encoding == UTF8

    def encode(self, name: str) -> bytes:
        """文件名 -> 写入压缩包的字节"""
        try:
            return name.encode(self.codec)
        except UnicodeEncodeError as e:
            raise TranscodingError(name, self.encoding) from e

    def decode(self, raw: bytes) -> str:
        """压缩包内的文件名字节 -> 文件名"""
        try:
            return raw.decode(self.codec)
        except UnicodeDecodeError as e:
            raise TranscodingError(raw, self.encoding) from e

    def entry_name(self, info: zipfile.ZipInfo) -> str:
        """
        还原读取到的条目的文件名。

        zipfile 对未设置 UTF-8 标志位的条目按 cp437 解码文件名，
        这里先取回原始字节再按选定的字符集解码。
        """
        if info.flag_bits & UTF8_FLAG:
            return info.orig_filename
        return self.decode(info.orig_filename.encode("cp437"))
