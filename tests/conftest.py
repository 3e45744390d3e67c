import pytest


def _cmtrace_line(message, time="15:30:00.000", date="07-27-2025", component="SMSAgent", type_="1"):
    return (
        f'<![LOG[{message}]LOG]!><time="{time}" date="{date}" component="{component}" '
        f'context="" type="{type_}" thread="100" file="a.log">'
    )


@pytest.fixture
def make_line():
    """Build a CMTrace record line"""
    return _cmtrace_line


@pytest.fixture
def write_log(tmp_path):
    """Write a log file under tmp_path and return its path"""
    def _write(name, lines, newline="\n"):
        path = tmp_path / name
        path.write_bytes(newline.join(lines).encode("utf-8"))
        return path
    return _write
