"""
运行配置

命令行参数优先，其次是环境变量，最后是当前目录下 .env 文件中的同名变量：

    GBZIP_ENCODING=GBK      # 文件名字符集，UTF-8 或 GBK
    GBZIP_DIR=./unzipped    # 解压目录
    GBZIP_VERBOSE=1         # 输出每个条目的处理过程
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import dotenv_values, find_dotenv

from gbzip.charset import UTF8, Transcoder, normalize_encoding

ENV_ENCODING = "GBZIP_ENCODING"
ENV_DIR = "GBZIP_DIR"
ENV_VERBOSE = "GBZIP_VERBOSE"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """一次运行的配置，创建后不再修改"""

    encoding: str = UTF8
    dest_dir: Path = Path(".")
    verbose: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "encoding", normalize_encoding(self.encoding))
        object.__setattr__(self, "dest_dir", Path(self.dest_dir))

    @property
    def transcoder(self) -> Transcoder:
        return Transcoder(self.encoding)


def load_config(
    encoding: Optional[str] = None,
    dest_dir: Union[str, Path, None] = None,
    verbose: Optional[bool] = None,
    env_file: Union[str, Path, None] = None,
) -> Config:
    """合并命令行参数、环境变量与 .env 文件，生成配置"""
    if env_file is None:
        env_file = find_dotenv(usecwd=True)
    env = {**dotenv_values(env_file), **os.environ}

    if encoding is None:
        encoding = env.get(ENV_ENCODING) or UTF8
    if dest_dir is None:
        dest_dir = env.get(ENV_DIR) or "."
    if verbose is None:
        verbose = (env.get(ENV_VERBOSE) or "").strip().lower() in _TRUTHY

    return Config(encoding=encoding, dest_dir=Path(dest_dir), verbose=verbose)
