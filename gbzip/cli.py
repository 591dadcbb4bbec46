"""
gbzip 命令行入口

功能：
1. 压缩目录为 zip：gbzip [-v] [-c 字符集] [目录] [压缩包.zip]
2. 解压 zip：gbzip -x [-v] [-c 字符集] [-d 目录] [压缩包.zip]
3. 解压时不给压缩包路径则从标准输入读取

使用示例：
gbzip -c GBK ./文书 文书.zip
gbzip -x -c GBK -d ./unzipped 文书.zip
cat 文书.zip | gbzip -x -c GBK
"""
import argparse
import sys
from typing import List, Optional

from gbzip.charset import SUPPORTED_ENCODINGS
from gbzip.config import Config, load_config
from gbzip.errors import GbzipError
from gbzip.unzip import extract
from gbzip.zipdir import archive, default_destination


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gbzip",
        description="zip 压缩/解压工具，支持 UTF-8 与 GBK 文件名",
    )
    parser.add_argument("-x", "--extract", action="store_true", help="解压（默认为压缩）")
    parser.add_argument(
        "-c", "-e", "--charset", "--encoding",
        dest="encoding", metavar="ENCODING",
        help=f"压缩包内文件名的字符集，可选 {' / '.join(SUPPORTED_ENCODINGS)}（默认 UTF-8，不区分大小写）",
    )
    parser.add_argument("-d", "--dir", dest="dest_dir", metavar="DIR", help="解压目录，不存在时自动创建（默认当前目录）")
    parser.add_argument("-v", "--verbose", action="store_true", default=None, help="输出每个条目的处理过程")
    parser.add_argument("paths", nargs="*", metavar="PATH", help="压缩：目录 [压缩包]；解压：[压缩包]")
    return parser


def run_archive(paths: List[str], config: Config) -> None:
    source = paths[0] if paths else "."
    destination = paths[1] if len(paths) > 1 else default_destination(source)
    archive(source, destination, config)


def run_extract(paths: List[str], config: Config) -> None:
    if paths:
        extract(paths[0], config)
    else:
        extract(sys.stdin.buffer, config)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.extract and len(args.paths) > 1:
        parser.error("解压时最多指定一个压缩包")
    if not args.extract and len(args.paths) > 2:
        parser.error("压缩时最多指定目录和压缩包两个参数")
    if not args.extract and args.dest_dir is not None:
        parser.error("-d 只能用于解压")

    try:
        config = load_config(encoding=args.encoding, dest_dir=args.dest_dir, verbose=args.verbose)
        if args.extract:
            run_extract(args.paths, config)
        else:
            run_archive(args.paths, config)
    except (GbzipError, OSError) as e:
        print(f"gbzip: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
