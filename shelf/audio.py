"""
Audio feedback for the console menu.

Sound is **opt-in** and **fails gracefully**: clips are played by handing
them to whichever command-line player the host provides (``afplay`` on
macOS, ``paplay`` or ``aplay`` on Linux).  If no player is installed, a clip
is missing, or the player cannot be started, the problem is logged at DEBUG
level and the menu carries on silently.

Usage
-----
    cues = CuePlayer('sounds')
    cues.play('success')

    with MusicSession(cues) as music:
        music.start('Menu.wav', volume=0.5)
        ...                       # stopped on exit from the block
"""

import atexit
import logging
import os
import shutil
import subprocess
from typing import List, Optional

logger = logging.getLogger('gameshelf.audio')

# Cue name -> clip file inside the sounds directory.
CUE_FILES = {
    'success': 'Success.wav',
    'error': 'Error.wav',
    'select': 'Select.wav',
    'back': 'Back.wav',
    'message': 'Message.wav',
}
MUSIC_FILE = 'Menu.wav'

# Players tried in order.
_PLAYERS = ('afplay', 'paplay', 'aplay')


def _clamp_volume(volume: float) -> float:
    return max(0.0, min(1.0, float(volume)))


def build_command(player: str, clip_path: str, volume: float = 1.0) -> List[str]:
    """Return the argv that plays *clip_path* with *player* at *volume*."""
    name = os.path.basename(player)
    volume = _clamp_volume(volume)
    if name == 'afplay':
        return [player, '-v', f'{volume:.2f}', clip_path]
    if name == 'paplay':
        return [player, f'--volume={int(volume * 65536)}', clip_path]
    # aplay has no volume control
    return [player, '-q', clip_path]


def find_player() -> Optional[str]:
    """Return the path of the first available command-line player, or ``None``."""
    for candidate in _PLAYERS:
        path = shutil.which(candidate)
        if path:
            return path
    return None


class NullCuePlayer:
    """Cue player that never makes a sound (sound disabled, tests)."""

    enabled = False

    def play(self, cue: str, volume: float = 1.0) -> Optional[subprocess.Popen]:
        return None

    def play_file(self, clip_path: str, volume: float = 1.0) -> Optional[subprocess.Popen]:
        return None


class CuePlayer:
    """Plays the menu's sound effects without blocking the caller.

    Started players are kept until they finish and are polled on the next
    call, so no exited player lingers as a zombie process.
    """

    def __init__(self, sounds_dir: str = 'sounds', player: Optional[str] = None) -> None:
        self.sounds_dir = sounds_dir
        self._player = player or find_player()
        self._running: List[subprocess.Popen] = []
        if self._player:
            logger.debug('Audio enabled (player=%s, sounds=%s)', self._player, sounds_dir)
        else:
            logger.debug('Audio disabled: no afplay/paplay/aplay on PATH')

    @property
    def enabled(self) -> bool:
        return self._player is not None

    @property
    def active(self) -> int:
        """Number of cue processes still playing."""
        self._reap()
        return len(self._running)

    def _reap(self) -> None:
        # poll() collects the exit status of finished players
        self._running = [p for p in self._running if p.poll() is None]

    def play(self, cue: str, volume: float = 1.0) -> Optional[subprocess.Popen]:
        """Start the clip registered for *cue*.

        Returns:
            The player process, or ``None`` if nothing was started.
        """
        filename = CUE_FILES.get(cue)
        if filename is None:
            logger.debug('Unknown cue %r', cue)
            return None
        return self.play_file(os.path.join(self.sounds_dir, filename), volume)

    def play_file(self, clip_path: str, volume: float = 1.0) -> Optional[subprocess.Popen]:
        if not self._player:
            return None
        if not os.path.isfile(clip_path):
            logger.debug('Sound clip not found: %s', clip_path)
            return None
        self._reap()
        try:
            proc = subprocess.Popen(
                build_command(self._player, clip_path, volume),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            logger.debug('Could not start %s: %s', self._player, exc)
            return None
        self._running.append(proc)
        return proc


class MusicSession:
    """Owns the single background-music process.

    Starting a new track stops and releases the previous one first.  The
    session is stopped on exit from a ``with`` block and, as a fallback, at
    interpreter exit.
    """

    def __init__(self, cues) -> None:
        self._cues = cues
        self._proc: Optional[subprocess.Popen] = None
        atexit.register(self.stop)

    @property
    def playing(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def start(self, clip_path: str, volume: float = 0.5) -> bool:
        """Replace the current track with *clip_path*.

        Returns:
            ``True`` if a player process was started.
        """
        self.stop()
        self._proc = self._cues.play_file(clip_path, volume)
        return self._proc is not None

    def stop(self) -> None:
        proc, self._proc = self._proc, None
        if proc is None or proc.poll() is not None:
            return
        proc.terminate()
        try:
            proc.wait(timeout=2)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()

    def close(self) -> None:
        self.stop()
        atexit.unregister(self.stop)

    def __enter__(self) -> 'MusicSession':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
