"""
Tests for the PCM WAV writer, block framing and container selection
"""
import io
import unittest
import wave
from unittest.mock import patch

import numpy as np

from timestamp_splitter.core.models import SampleBuffer
from timestamp_splitter.encoding import encode_segment, encode_wav, output_extension, parse_wav_header
from timestamp_splitter.encoding.framed import (
    BLOCK_SIZE,
    PydubFrameEncoder,
    encode_framed,
    metadata_to_tags,
    stereo_pcm,
)
from timestamp_splitter.encoding.pcm import HEADER_SIZE, float_to_int16
from timestamp_splitter.services.errors import EncoderError


class RecordingEncoder:
    """Fake frame encoder that records block sizes and emits markers."""

    def __init__(self):
        self.blocks = []
        self.flushed = False

    def encode_block(self, left, right):
        self.blocks.append((np.array(left), np.array(right)))
        return bytes([len(self.blocks)])

    def flush(self):
        self.flushed = True
        return b'END'


class TestFloatToInt16(unittest.TestCase):

    def test_asymmetric_scaling_and_clamping(self):
        values = np.array([-2.0, -1.0, -0.5, 0.0, 0.5, 1.0, 3.0])
        self.assertEqual(float_to_int16(values).tolist(),
                         [-32768, -32768, -16384, 0, 16383, 32767, 32767])

    def test_truncates_toward_zero(self):
        values = np.array([0.00004, -0.00004, 0.99999])
        # 0.00004 * 32767 = 1.31, -0.00004 * 32768 = -1.31, 0.99999 * 32767 = 32766.67
        self.assertEqual(float_to_int16(values).tolist(), [1, -1, 32766])


class TestWavEncoding(unittest.TestCase):

    def test_header_round_trip(self):
        samples = np.zeros((2, 480), dtype=np.float32)
        data = encode_wav(SampleBuffer(sample_rate=48000, samples=samples))
        header = parse_wav_header(data)
        self.assertEqual(len(data), HEADER_SIZE + 480 * 2 * 2)
        self.assertEqual(header['channels'], 2)
        self.assertEqual(header['sample_rate'], 48000)
        self.assertEqual(header['byte_rate'], 48000 * 2 * 2)
        self.assertEqual(header['block_align'], 4)
        self.assertEqual(header['bits_per_sample'], 16)
        self.assertEqual(header['format_tag'], 1)
        self.assertEqual(header['data_size'], 480 * 4)
        self.assertEqual(header['riff_size'], len(data) - 8)

    def test_samples_are_interleaved_little_endian(self):
        samples = np.array([[1.0, -1.0], [0.5, 0.0]], dtype=np.float32)
        data = encode_wav(SampleBuffer(sample_rate=8000, samples=samples))
        body = np.frombuffer(data[HEADER_SIZE:], dtype='<i2').tolist()
        self.assertEqual(body, [32767, 16383, -32768, 0])

    def test_readable_by_wave_module(self):
        samples = np.sin(np.linspace(0, 20, 1000, dtype=np.float32)).reshape(1, -1)
        data = encode_wav(SampleBuffer(sample_rate=22050, samples=samples))
        with wave.open(io.BytesIO(data)) as wf:
            self.assertEqual(wf.getnchannels(), 1)
            self.assertEqual(wf.getframerate(), 22050)
            self.assertEqual(wf.getsampwidth(), 2)
            self.assertEqual(wf.getnframes(), 1000)

    def test_parse_rejects_garbage(self):
        with self.assertRaises(ValueError):
            parse_wav_header(b'RIFF')
        with self.assertRaises(ValueError):
            parse_wav_header(b'X' * 44)


class TestFramedEncoding(unittest.TestCase):

    def test_block_count_and_order(self):
        length = BLOCK_SIZE * 2 + 100
        buf = SampleBuffer(sample_rate=44100, samples=np.zeros((2, length), dtype=np.float32))
        encoder = RecordingEncoder()
        data = encode_framed(buf, encoder)
        self.assertEqual([len(l) for l, _ in encoder.blocks], [BLOCK_SIZE, BLOCK_SIZE, 100])
        self.assertEqual(data, b'\x01\x02\x03END')
        self.assertTrue(encoder.flushed)

    def test_mono_is_duplicated(self):
        samples = np.linspace(-1, 1, 50, dtype=np.float32).reshape(1, -1)
        encoder = RecordingEncoder()
        encode_framed(SampleBuffer(sample_rate=8000, samples=samples), encoder, block_size=20)
        for left, right in encoder.blocks:
            np.testing.assert_array_equal(left, right)
        self.assertEqual(sum(len(l) for l, _ in encoder.blocks), 50)

    def test_stereo_channels_are_kept_apart(self):
        samples = np.array([[0.5] * 10, [-0.5] * 10], dtype=np.float32)
        left, right = stereo_pcm(SampleBuffer(sample_rate=8000, samples=samples))
        self.assertTrue(np.all(left == 16383))
        self.assertTrue(np.all(right == -16384))

    def test_empty_blocks_are_skipped(self):
        class Quiet(RecordingEncoder):
            def encode_block(self, left, right):
                super().encode_block(left, right)
                return b''

        buf = SampleBuffer(sample_rate=8000, samples=np.zeros((1, 10), dtype=np.float32))
        self.assertEqual(encode_framed(buf, Quiet(), block_size=4), b'END')


class TestPydubFrameEncoder(unittest.TestCase):

    def test_unknown_extension(self):
        with self.assertRaises(EncoderError):
            PydubFrameEncoder('flac', 44100)

    @patch('timestamp_splitter.encoding.framed.AudioSegment')
    def test_flush_exports_buffered_pcm(self, audio_segment_cls):
        def fake_export(out, **kwargs):
            out.write(b'ID3fake')
            return out
        audio_segment_cls.return_value.export.side_effect = fake_export
        audio_segment_cls.return_value.__len__.return_value = 1000

        encoder = PydubFrameEncoder('mp3', 44100, bitrate='192k', tags={'title': 'T'})
        left = np.array([1, 2, 3], dtype=np.int16)
        right = np.array([4, 5, 6], dtype=np.int16)
        self.assertEqual(encoder.encode_block(left, right), b'')
        self.assertEqual(encoder.flush(), b'ID3fake')

        _, kwargs = audio_segment_cls.call_args
        self.assertEqual(kwargs['channels'], 2)
        self.assertEqual(kwargs['sample_width'], 2)
        self.assertEqual(kwargs['frame_rate'], 44100)
        interleaved = np.frombuffer(kwargs['data'], dtype='<i2').tolist()
        self.assertEqual(interleaved, [1, 4, 2, 5, 3, 6])

        _, export_kwargs = audio_segment_cls.return_value.export.call_args
        self.assertEqual(export_kwargs['format'], 'mp3')
        self.assertEqual(export_kwargs['bitrate'], '192k')
        self.assertEqual(export_kwargs['tags'], {'title': 'T'})

    @patch('timestamp_splitter.encoding.framed.AudioSegment')
    def test_export_failure_is_typed(self, audio_segment_cls):
        audio_segment_cls.return_value.export.side_effect = RuntimeError("ffmpeg missing")
        encoder = PydubFrameEncoder('ogg', 44100)
        with self.assertRaises(EncoderError):
            encoder.flush()


class TestContainerSelection(unittest.TestCase):

    def test_output_extension(self):
        self.assertEqual(output_extension('wav'), 'wav')
        self.assertEqual(output_extension('MP3'), 'mp3')
        self.assertEqual(output_extension('m4a'), 'm4a')
        self.assertEqual(output_extension('flac'), 'wav')
        self.assertEqual(output_extension(''), 'wav')

    def test_wav_path_is_bit_exact(self):
        buf = SampleBuffer(sample_rate=8000, samples=np.zeros((1, 8), dtype=np.float32))
        self.assertEqual(encode_segment(buf, 'wav'), encode_wav(buf))

    def test_lossy_path_uses_factory(self):
        buf = SampleBuffer(sample_rate=8000, samples=np.zeros((1, 8), dtype=np.float32))
        seen = {}

        def factory(extension, sample_rate, tags):
            seen.update(extension=extension, sample_rate=sample_rate, tags=tags)
            return RecordingEncoder()

        data = encode_segment(buf, 'mp3', factory, tags={'title': 'x'})
        self.assertEqual(data, b'\x01END')
        self.assertEqual(seen, {'extension': 'mp3', 'sample_rate': 8000, 'tags': {'title': 'x'}})

    def test_encoder_crash_becomes_encoder_error(self):
        class Broken(RecordingEncoder):
            def flush(self):
                raise RuntimeError("boom")

        buf = SampleBuffer(sample_rate=8000, samples=np.zeros((1, 8), dtype=np.float32))
        with self.assertRaises(EncoderError):
            encode_segment(buf, 'ogg', lambda *a: Broken())

    def test_unsupported_output(self):
        buf = SampleBuffer(sample_rate=8000, samples=np.zeros((1, 8), dtype=np.float32))
        with self.assertRaises(EncoderError):
            encode_segment(buf, 'flac')


class TestMetadataToTags(unittest.TestCase):

    def test_flattening(self):
        tags = metadata_to_tags({
            'title': 'Intro',
            'artist': 'Band',
            'genre': ['Rock', 'Live'],
            'year': 2020,
            'track': (3, None),
            'picture': [b'...'],
        })
        self.assertEqual(tags, {
            'title': 'Intro',
            'artist': 'Band',
            'genre': 'Rock, Live',
            'date': '2020',
            'track': '3',
        })

    def test_track_with_total(self):
        self.assertEqual(metadata_to_tags({'track': (2, 10)})['track'], '2/10')

    def test_empty(self):
        self.assertEqual(metadata_to_tags(None), {})


if __name__ == "__main__":
    unittest.main()
