#!/usr/bin/env python3
"""Generate iOS + Android icon sets from one image without opening the UI.
Run:
  python build_icon.py path/to/icon.png [output_dir] [background]
Writes output_dir/AppIcon.appiconset and output_dir/android-icons (default ./icons).
"""
import sys
from pathlib import Path

from iconforge import IconForgeError, generate_icons


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        return 1
    fg = Path(sys.argv[1])
    out = Path(sys.argv[2]) if len(sys.argv) > 2 else Path.cwd() / 'icons'
    background = sys.argv[3] if len(sys.argv) > 3 else None
    if not fg.exists():
        print('Image not found:', fg)
        return 1
    try:
        report = generate_icons(str(out), foreground=str(fg), background=background,
                                force=True, on_progress=print)
    except IconForgeError as e:
        print(e)
        return 2
    for platform, err in report.errors.items():
        print('FAILED', platform.value, '-', err)
    for platform, result in report.results.items():
        print('Wrote', len(result.files), 'files to', result.output_root)
    return 0 if report.ok else 2


if __name__ == '__main__':
    raise SystemExit(main())
