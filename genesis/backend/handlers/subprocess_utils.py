import os
import sys


def get_clean_subprocess_env(extra_env=None):
    """
    Returns a copy of os.environ with bundled-runtime variables removed, so a
    game started from a packaged launcher does not inherit them.
    Optionally merges in extra_env dict.
    """
    env = os.environ.copy()

    # AppImage variables make child processes look like new AppImage launches
    for key in ['APPIMAGE', 'APPDIR', 'ARGV0', 'OWD']:
        env.pop(key, None)

    # PyInstaller bundle variables
    for k in list(env):
        if k.startswith('_MEIPASS'):
            del env[k]

    # A frozen launcher prepends its bundle to the library path; restore the original
    if getattr(sys, 'frozen', False) and 'LD_LIBRARY_PATH_ORIG' in env:
        env['LD_LIBRARY_PATH'] = env.pop('LD_LIBRARY_PATH_ORIG')

    if extra_env:
        env.update(extra_env)
    return env
