"""
Additional Config tests: deep merge of nested sections and edge cases.
"""
import tempfile
import os
import unittest
import yaml

from timestamp_splitter.config import Config


class TestConfigEdge(unittest.TestCase):
    """Edge cases for loading and merging configuration"""

    def _write(self, data):
        with tempfile.NamedTemporaryFile('w+', suffix='.yaml', delete=False) as f:
            yaml.safe_dump(data, f)
        self.addCleanup(os.unlink, f.name)
        return f.name

    def test_encoder_bitrate_override(self):
        cfg = Config(self._write({'encoder': {'bitrate': '192k'}}))
        self.assertEqual(cfg.get('encoder'), {'bitrate': '192k'})

    def test_empty_encoder_section_keeps_defaults(self):
        cfg = Config(self._write({'encoder': {}, 'output_dir': './parts'}))
        self.assertEqual(cfg.get('encoder'), {'bitrate': '128k'})

    def test_non_dict_encoder_is_rejected(self):
        for value in (None, 'fast', ['128k']):
            path = self._write({'encoder': value})
            with self.assertRaises(ValueError) as ctx:
                Config(path)
            self.assertIn("'encoder' must be a mapping", str(ctx.exception))

    def test_non_integer_limits_are_rejected(self):
        for key in ('max_file_size_mb', 'max_title_length'):
            for value in (None, 'lots', True, 1.5):
                with self.assertRaises(ValueError):
                    Config(self._write({key: value}))

    def test_integer_limits_are_accepted(self):
        cfg = Config(self._write({'max_file_size_mb': 50, 'max_title_length': 80}))
        self.assertEqual(cfg.get('max_file_size_mb'), 50)
        self.assertEqual(cfg.get('max_title_length'), 80)

    def test_unknown_keys_are_preserved(self):
        with tempfile.NamedTemporaryFile('w+', suffix='.yaml', delete=False) as f:
            yaml.safe_dump({'unknown_key': 123}, f)
            path = f.name
        try:
            cfg = Config(path)
            self.assertEqual(cfg.get('unknown_key'), 123)
        finally:
            os.unlink(path)

    def test_yaml_crlf_and_null_values(self):
        content = 'output_dir: ./parts\r\narchive_name: null\r\n'
        with tempfile.NamedTemporaryFile('w+', suffix='.yaml', delete=False) as f:
            f.write(content)
            path = f.name
        try:
            cfg = Config(path)
            self.assertEqual(cfg.get('output_dir'), './parts')
            self.assertIsNone(cfg.get('archive_name'))
            self.assertEqual(cfg.get('max_file_size_mb'), 500)
        finally:
            os.unlink(path)


if __name__ == '__main__':
    unittest.main()
