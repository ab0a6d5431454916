"""Encoding package: PCM WAV writer and block-framed lossy encoders.

Public API:
    - encode_segment: choose the container for a source extension and encode
    - output_extension: extension of the files produced for a source
"""

from .facade import encode_segment, output_extension, pydub_encoder_factory  # noqa: F401
from .framed import BLOCK_SIZE, FrameEncoder, encode_framed  # noqa: F401
from .pcm import encode_wav, parse_wav_header  # noqa: F401
