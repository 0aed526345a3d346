"""
Exception hierarchy for serverbench
"""


class ServerBenchError(Exception):
    """Base class for all serverbench errors"""


class InvocationError(ServerBenchError):
    """The load generator failed to run or wrote to stderr"""

    def __init__(self, message, returncode=None, stderr=None):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ParseError(ServerBenchError):
    """The load generator output is not a usable report"""


class MalformedRecordError(ServerBenchError):
    """A stored entry does not look like a metrics record"""


class CacheError(ServerBenchError, OSError):
    """The result cache could not be read or written"""

    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path


class CacheCorruptError(CacheError):
    """The cache file exists but does not hold a JSON object"""


class CacheLockError(CacheError):
    """The cache lock was not acquired in time"""


class CacheWriteError(CacheError):
    """Writing the cache file failed"""
