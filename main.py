"""
main.py — command-line entry point for development use.

Once installed with `pip install -e .`, prefer:
    timetable-cli --config data/sample_department.json

sys.path manipulation here is a fallback so that `python main.py --config ...`
works from a fresh checkout without a prior editable install.
"""
import sys
from pathlib import Path

_src = Path(__file__).parent / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from timetable_app.cli import main  # noqa: E402

if __name__ == "__main__":
    main()
