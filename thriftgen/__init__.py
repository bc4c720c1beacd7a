"""
thriftgen: Scala code generation for Thrift documents.
"""

__version__ = "0.1.0"
