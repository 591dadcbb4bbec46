"""gbzip 的异常类型"""

from typing import Optional, Union


class GbzipError(Exception):
    """gbzip 所有错误的基类"""

    def __init__(self, message: str, suggestion: Optional[str] = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}（{self.suggestion}）"
        return self.message


class UnsupportedEncoding(GbzipError):
    """不支持的文件名字符集"""

    def __init__(self, encoding: str) -> None:
        self.encoding = encoding
        super().__init__(f"不支持的字符集: {encoding}", "可选 UTF-8 或 GBK")


class TranscodingError(GbzipError):
    """文件名无法在目标字符集下表示"""

    def __init__(self, name: Union[str, bytes], encoding: str) -> None:
        self.name = name
        self.encoding = encoding
        if isinstance(name, bytes):
            message = f"文件名不是合法的 {encoding} 编码: {name!r}"
        else:
            message = f"文件名无法用 {encoding} 表示: {name!r}"
        super().__init__(message, "请用 -c 指定正确的字符集")


class ArchiveFormatError(GbzipError):
    """输入不是合法的 zip 压缩包"""


class UnsafeEntryError(GbzipError):
    """压缩包条目路径会写到目标目录之外"""

    def __init__(self, name: str, reason: str = "包含 .. 路径") -> None:
        self.name = name
        super().__init__(f"拒绝解压不安全的条目 {name!r}: {reason}")
