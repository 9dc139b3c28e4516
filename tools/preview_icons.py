#!/usr/bin/env python3
"""Renders the status icons to PNG files for checking them on a desktop."""

import os

from peekguard.alerts.state_machine import AlertState
from peekguard.ui.icons import render_icon


def main():
    out_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "preview_output")
    os.makedirs(out_dir, exist_ok=True)

    for state in AlertState:
        for size in (16, 64):
            path = os.path.join(out_dir, f"{state.value}_{size}.png")
            render_icon(state, size).save(path)
            print(f"Saved {path}")

    print(f"\nAll icons saved to {out_dir}/")


if __name__ == "__main__":
    main()
