"""zip 压缩/解压工具，支持 UTF-8 与 GBK 文件名"""

__version__ = "0.1.0"
