"""Process utilities."""
import logging
import subprocess
from typing import List

logger = logging.getLogger(__name__)


def run(cmd: List[str], **kwargs) -> subprocess.CompletedProcess:
    """Run a command to completion and return its text output.

    Output is captured and decoded as UTF-8; undecodable bytes become U+FFFD
    rather than failing the call. The child never inherits our stdin, which
    carries the protocol stream. Non-zero exits are returned, not raised.

    Args:
        cmd: Command to run as list of strings
        **kwargs: Overrides for the subprocess.run defaults
    """
    kwargs.setdefault('capture_output', True)
    kwargs.setdefault('text', True)
    kwargs.setdefault('stdin', subprocess.DEVNULL)
    if kwargs['text']:
        kwargs.setdefault('encoding', 'utf-8')
        kwargs.setdefault('errors', 'replace')

    command = ' '.join(cmd)
    logger.debug(f"Running: {command}")

    try:
        result = subprocess.run(cmd, **kwargs)
    except OSError as e:
        logger.error(f"Could not run {command}: {e}")
        raise

    if result.returncode != 0:
        logger.error(f"Exit {result.returncode} from {command}: {(result.stderr or '').strip()}")
    elif result.stdout:
        logger.debug(f"{len(result.stdout)} chars of output from {cmd[0]}")

    return result
