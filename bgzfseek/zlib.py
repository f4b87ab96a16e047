"""
Provides a basic wrapper for the zlib library.

This uses ctypes to load the zlib dll from the system.
If this is run on a Windows system and ctypes.util.find() can not find zlibwapi.dll it will look in the folder this
code is stored in.
Only the raw inflate and CRC32 entry points are bound, BGZF blocks carry their own gzip framing.
"""

import ctypes as C
import platform
from ctypes import util

# Special thanks to Mark Nottingham https://gist.github.com/mnot/242459
# and the zlib example source for reference implementations.

# Constants taken from zlib.h
MAX_WBITS = 15
ZLIB_VERSION = C.c_char_p(b"1.2.3")

# Allowed flush values; see inflate()
Z_FINISH = 4

# Return codes for the decompression functions. Negative values
# are errors, positive values are used for special but normal events.
Z_OK = 0
Z_STREAM_END = 1
Z_STREAM_ERROR = -2
Z_DATA_ERROR = -3
Z_MEM_ERROR = -4
Z_BUF_ERROR = -5
Z_VERSION_ERROR = -6

Z_NULL = 0  # for initializing zalloc, zfree, opaque

if platform.system() == 'Windows':
    path = util.find_library("zlib1.dll")
    if not path:
        import os

        path = os.path.join(os.path.dirname(os.path.realpath(__file__)), 'zlibwapi.dll')
    _zlib = C.windll.LoadLibrary(path)
else:
    _zlib = C.cdll.LoadLibrary(util.find_library("z") or "libz.so.1")


class zState(C.Structure):
    """
    Represents the zlib internal state object used during inflate
    :ivar next_in: C._Pointer   next input byte
    :ivar avail_in: C.c_uint    number of bytes available at next_in
    :ivar total_in: C.c_ulong   total number of input bytes read so far
    :ivar next_out: C._Pointer  next output byte will go here
    :ivar avail_out: C.c_uint   remaining free space at next_out
    :ivar total_out: C.c_ulong  total number of bytes output so far
    :ivar msg: C.c_char_p       last error message, NULL if no error
    :ivar state: C.c_void_p     used to allocate the internal state
    :ivar zalloc: C.c_void_p    used to free the internal state
    :ivar zfree: C.c_void_p     private data object passed to zalloc and zfree
    :ivar opaque: C.c_void_p    best guess about the data type: binary or text
    :ivar data_type: C.c_int    for deflate, or the decoding state for inflate
    :ivar adler: C.c_ulong      Adler-32 or CRC-32 value of the uncompressed data
    :ivar reserved: C.c_ulong   reserved for future use
    """
    _fields_ = [
        ("next_in", C.POINTER(C.c_ubyte)),
        ("avail_in", C.c_uint),
        ("total_in", C.c_ulong),
        ("next_out", C.POINTER(C.c_ubyte)),
        ("avail_out", C.c_uint),
        ("total_out", C.c_ulong),
        ("msg", C.c_char_p),
        ("state", C.c_void_p),
        ("zalloc", C.c_void_p),
        ("zfree", C.c_void_p),
        ("opaque", C.c_void_p),
        ("data_type", C.c_int),
        ("adler", C.c_ulong),
        ("reserved", C.c_ulong),
    ]


SIZEOF_ZSTATE = C.sizeof(zState)

_zlib.inflateInit2_.argtypes = [C.POINTER(zState), C.c_int, C.c_char_p, C.c_int]
_zlib.inflateInit2_.restype = C.c_int
_zlib.inflate.argtypes = [C.POINTER(zState), C.c_int]
_zlib.inflate.restype = C.c_int
_zlib.inflateEnd.argtypes = [C.POINTER(zState)]
_zlib.inflateEnd.restype = C.c_int
_zlib.crc32.argtypes = [C.c_ulong, C.POINTER(C.c_ubyte), C.c_uint]
_zlib.crc32.restype = C.c_ulong


def raw_decompress(src, dest) -> (int, zState):
    """
    Wraps zlib.inflate() for a single shot raw deflate stream.
    The inflate state is always released before returning, the returned state is only useful for its counters.
    :param src: ctypes c_ubyte array containing the compressed data.
    :param dest: ctypes c_ubyte array to receive the decompressed data.
    :return: Tuple containing (Error code, zlib state object)
    """
    state = zState()
    state.next_in = C.cast(C.pointer(src), C.POINTER(C.c_ubyte))
    state.avail_in = len(src)
    state.next_out = C.cast(C.pointer(dest), C.POINTER(C.c_ubyte))
    state.avail_out = len(dest)

    err = _zlib.inflateInit2_(C.byref(state), -MAX_WBITS, ZLIB_VERSION, SIZEOF_ZSTATE)
    if err != Z_OK:
        return err, state

    try:
        err = _zlib.inflate(C.byref(state), Z_FINISH)
    finally:
        _zlib.inflateEnd(C.byref(state))

    return err, state


def crc32(src, crc=0):
    """
    Calculate the CRC32 value of the input data.
    :param src: Writable buffer containing input data to evaluate.
    :param crc: Existing CRC to add to, 0 to start a new one.
    :return: CRC32 value of src.
    """
    size = len(src)
    if not size:
        return crc
    data = (C.c_ubyte * size).from_buffer(src)
    return _zlib.crc32(crc, data, size) & 0xFFFFFFFF
