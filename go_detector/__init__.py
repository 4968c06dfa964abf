"""
go-detector - Go 项目类型识别

Classifies a Go source tree as a command-line program or a reusable library.
"""

__version__ = "1.0.0"
