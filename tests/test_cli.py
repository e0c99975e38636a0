"""
Tests for cli.py - Command line interface.
"""

import json
from io import StringIO
from unittest.mock import patch

import pytest

from jiefen.cli import main
from jiefen.db.connection import dispose_all


class TestCLIBasics:
    """Tests for basic CLI functionality."""

    def test_version(self, capsys):
        """Test version flag."""
        result = main(['--version'])
        assert result == 0
        captured = capsys.readouterr()
        assert 'jiefen' in captured.out
        assert '0.1.0' in captured.out

    def test_help(self, capsys):
        """Test help flag."""
        with pytest.raises(SystemExit) as exc_info:
            main(['--help'])
        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert 'segmentation' in captured.out

    def test_no_input(self):
        """Test running with no arguments and empty stdin."""
        with patch('sys.stdin', StringIO('')):
            result = main([])
        assert result == 1


class TestCLISegmentation:
    """Tests for segmentation output against a small dictionary."""

    def test_default_mode(self, capsys, dict_file):
        result = main(['--dict', str(dict_file), '我来到北京清华大学'])
        assert result == 0
        assert capsys.readouterr().out.strip() == '我 / 来到 / 北京 / 清华大学'

    def test_full_mode(self, capsys, dict_file):
        result = main(['--dict', str(dict_file), '-a', '清华大学'])
        assert result == 0
        assert capsys.readouterr().out.strip() == '清华 / 清华大学 / 大学'

    def test_search_mode(self, capsys, dict_file):
        result = main(['--dict', str(dict_file), '-s', '清华大学'])
        assert result == 0
        assert capsys.readouterr().out.strip() == '清华 / 大学 / 清华大学'

    def test_pos(self, capsys, dict_file):
        result = main(['--dict', str(dict_file), '-p', '我来到北京'])
        assert result == 0
        assert capsys.readouterr().out.strip() == '我/r / 来到/v / 北京/ns'

    def test_delimiter(self, capsys, dict_file):
        result = main(['--dict', str(dict_file), '-d', '|', '我来到北京'])
        assert result == 0
        assert capsys.readouterr().out.strip() == '我|来到|北京'

    def test_stdin(self, capsys, dict_file):
        with patch('sys.stdin', StringIO('北京大学')):
            result = main(['--dict', str(dict_file)])
        assert result == 0
        assert capsys.readouterr().out.strip() == '北京 / 大学'

    def test_user_dict(self, capsys, dict_file, tmp_path):
        user = tmp_path / 'user.txt'
        user.write_text('北京大学 100 nt\n', encoding='utf-8')
        result = main(['--dict', str(dict_file), '-u', str(user), '北京大学'])
        assert result == 0
        assert capsys.readouterr().out.strip() == '北京大学'

    def test_json_output(self, capsys, dict_file, tmp_path):
        user = tmp_path / 'user.txt'
        user.write_text('杭研 10 nz\n坏行 -1 n\n', encoding='utf-8')
        result = main(['--dict', str(dict_file), '-j', '-u', str(user), '我来到北京'])
        assert result == 0
        data = json.loads(capsys.readouterr().out)
        assert data['mode'] == 'default'
        assert [t['text'] for t in data['tokens']] == ['我', '来到', '北京']
        assert data['tokens'][1] == {'text': '来到', 'start': 1, 'end': 3, 'tag': None}
        assert data['user_dicts'][0]['kept'] == 1
        assert data['user_dicts'][0]['skipped'][0]['line_no'] == 2
        assert not data['user_dicts'][0]['failed']


class TestCLIErrorHandling:
    """Tests for error handling."""

    def test_missing_dictionary(self, capsys, tmp_path):
        result = main(['--dict', str(tmp_path / 'nope.txt'), '北京'])
        assert result == 1
        assert 'Error' in capsys.readouterr().err


class TestBuildCache:
    """Tests for the build-cache subcommand."""

    def test_build_cache(self, capsys, dict_file, tmp_path):
        db_path = tmp_path / 'dict.db'
        try:
            result = main(['build-cache', '--dict', str(dict_file), '--output', str(db_path)])
        finally:
            dispose_all()
        assert result == 0
        assert db_path.exists()
        assert 'Words: 14' in capsys.readouterr().out

    def test_no_output_path(self, capsys, dict_file):
        with patch('jiefen.cli.get_db_path', return_value=None):
            result = main(['build-cache', '--dict', str(dict_file)])
        assert result == 1
        assert 'JIEFEN_CACHE_PATH' in capsys.readouterr().err

    def test_missing_dictionary(self, capsys, tmp_path):
        result = main(['build-cache', '--dict', str(tmp_path / 'nope.txt'),
                       '--output', str(tmp_path / 'dict.db')])
        assert result == 1
