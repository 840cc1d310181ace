#!/usr/bin/env python3
"""
Unit tests for shelf.audio (no real sound is played).

Run with:
    python -m pytest tests/test_audio.py
"""
import os
import shutil
import subprocess
import sys
import tempfile
import unittest
from unittest.mock import MagicMock, patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from shelf import audio
from shelf.audio import CuePlayer, MusicSession, NullCuePlayer, build_command, find_player


class TestBuildCommand(unittest.TestCase):

    def test_afplay_volume(self):
        self.assertEqual(build_command('/usr/bin/afplay', 'a.wav', 0.5),
                         ['/usr/bin/afplay', '-v', '0.50', 'a.wav'])

    def test_paplay_volume(self):
        self.assertEqual(build_command('paplay', 'a.wav', 1.0),
                         ['paplay', '--volume=65536', 'a.wav'])

    def test_aplay_ignores_volume(self):
        self.assertEqual(build_command('aplay', 'a.wav', 0.1), ['aplay', '-q', 'a.wav'])

    def test_volume_clamped(self):
        self.assertEqual(build_command('afplay', 'a.wav', 3)[2], '1.00')
        self.assertEqual(build_command('afplay', 'a.wav', -1)[2], '0.00')


class TestFindPlayer(unittest.TestCase):

    def test_first_available(self):
        found = {'paplay': '/usr/bin/paplay', 'aplay': '/usr/bin/aplay'}
        with patch('shelf.audio.shutil.which', side_effect=found.get):
            self.assertEqual(find_player(), '/usr/bin/paplay')

    def test_none_available(self):
        with patch('shelf.audio.shutil.which', return_value=None):
            self.assertIsNone(find_player())


class TestCuePlayer(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        for filename in audio.CUE_FILES.values():
            open(os.path.join(self.tmp, filename), 'wb').close()

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_play_launches_player(self):
        cues = CuePlayer(self.tmp, player='aplay')
        with patch('shelf.audio.subprocess.Popen') as popen:
            proc = cues.play('success')
        self.assertIs(proc, popen.return_value)
        argv = popen.call_args.args[0]
        self.assertEqual(argv, ['aplay', '-q', os.path.join(self.tmp, 'Success.wav')])
        self.assertEqual(popen.call_args.kwargs['stdout'], subprocess.DEVNULL)

    def test_unknown_cue(self):
        cues = CuePlayer(self.tmp, player='aplay')
        with patch('shelf.audio.subprocess.Popen') as popen:
            self.assertIsNone(cues.play('fanfare'))
        popen.assert_not_called()

    def test_missing_clip(self):
        cues = CuePlayer(os.path.join(self.tmp, 'empty'), player='aplay')
        with patch('shelf.audio.subprocess.Popen') as popen:
            self.assertIsNone(cues.play('error'))
        popen.assert_not_called()

    def test_no_player_is_silent(self):
        with patch('shelf.audio.shutil.which', return_value=None):
            cues = CuePlayer(self.tmp)
        self.assertFalse(cues.enabled)
        with patch('shelf.audio.subprocess.Popen') as popen:
            self.assertIsNone(cues.play('success'))
        popen.assert_not_called()

    def test_launch_failure_is_silent(self):
        cues = CuePlayer(self.tmp, player='aplay')
        with patch('shelf.audio.subprocess.Popen', side_effect=OSError('boom')):
            self.assertIsNone(cues.play('success'))

    def test_finished_cues_are_reaped(self):
        cues = CuePlayer(self.tmp, player='aplay')
        first, second = MagicMock(), MagicMock()
        first.poll.return_value = None
        second.poll.return_value = None
        with patch('shelf.audio.subprocess.Popen', side_effect=[first, second]):
            cues.play('select')
            self.assertEqual(cues.active, 1)
            first.poll.return_value = 0
            cues.play('success')
        first.poll.assert_called()
        self.assertEqual(cues.active, 1)
        second.poll.return_value = 0
        self.assertEqual(cues.active, 0)
        self.assertIsNone(cues.play_file('Menu.wav'))


class TestNullCuePlayer(unittest.TestCase):

    def test_never_plays(self):
        cues = NullCuePlayer()
        self.assertFalse(cues.enabled)
        self.assertIsNone(cues.play('success'))


class TestMusicSession(unittest.TestCase):

    def _proc(self, running=True):
        proc = MagicMock()
        proc.poll.return_value = None if running else 0
        return proc

    def test_start_plays_clip(self):
        cues = MagicMock()
        cues.play_file.return_value = self._proc()
        with MusicSession(cues) as music:
            self.assertTrue(music.start('Menu.wav', 0.5))
            self.assertTrue(music.playing)
        cues.play_file.assert_called_once_with('Menu.wav', 0.5)

    def test_start_stops_previous_track(self):
        first, second = self._proc(), self._proc()
        cues = MagicMock()
        cues.play_file.side_effect = [first, second]
        with MusicSession(cues) as music:
            music.start('a.wav')
            music.start('b.wav')
            first.terminate.assert_called_once()
            second.terminate.assert_not_called()
        second.terminate.assert_called_once()

    def test_stop_kills_unresponsive_player(self):
        proc = self._proc()
        proc.wait.side_effect = [subprocess.TimeoutExpired('aplay', 2), 0]
        cues = MagicMock()
        cues.play_file.return_value = proc
        music = MusicSession(cues)
        music.start('a.wav')
        music.close()
        proc.kill.assert_called_once()

    def test_finished_track_not_terminated(self):
        proc = self._proc(running=False)
        cues = MagicMock()
        cues.play_file.return_value = proc
        with MusicSession(cues) as music:
            music.start('a.wav')
            self.assertFalse(music.playing)
        proc.terminate.assert_not_called()

    def test_start_without_sound(self):
        with MusicSession(NullCuePlayer()) as music:
            self.assertFalse(music.start('Menu.wav'))
            self.assertFalse(music.playing)


if __name__ == '__main__':
    unittest.main()
