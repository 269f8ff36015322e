import subprocess

import kimspect


def get_version() -> str:
    # the version string was patched by a release - return __version__ which will be correct
    if kimspect.__version__ != "dev":
        return kimspect.__version__

    # we are running from an unreleased dev version
    try:
        tag = subprocess.check_output(["git", "describe", "--tags"], stderr=subprocess.DEVNULL).decode().strip()
        branch = (
            subprocess.check_output(["git", "rev-parse", "--abbrev-ref", "HEAD"], stderr=subprocess.DEVNULL)
            .decode()
            .strip()
        )
        status = subprocess.check_output(["git", "status", "--porcelain"], stderr=subprocess.DEVNULL).decode().strip()
        dirty = "-dirty" if status else ""

        return f"{tag}-{branch}{dirty}"

    except (OSError, subprocess.CalledProcessError):
        return kimspect.__version__
