# strike_annote/__init__.py
'''
strike_annote/
    __init__.py
    __main__.py

    app.py                 # QApplication + logging + data root selection
    main_window.py         # QMainWindow layout + wiring + keyboard + playback timer

    domain.py              # actions/catalog, Segment, VideoItem/VideoQueue, AppConfig
    timeutils.py           # time/frame helpers, zoom, timeline time<->percent mapping, ticks
    segment_store.py       # segment collection, id allocation, sort/filter views
    marking.py             # mark in/out/commit state machine + rejection errors
    playback.py            # playback clock (tick/seek/step/jump/speed)
    keymap.py              # key -> command resolution
    session.py             # per-video labeling session + user-facing outcomes
    export.py              # export JSON document
    persistence.py         # config.json, queue.json, per-video label files
    media_probe.py         # local video validation, ffprobe metadata, quality report

    widgets/
      timeline.py          # zoomable timeline: ticks, segments, marks, playhead, click-to-seek
      action_panel.py      # action buttons grouped by category
      segment_list.py      # sortable/filterable segment table + edit/delete
      video_view.py        # video surface placeholder (time/frame readout)
      video_queue.py       # queue list + progress

    dialogs/
      keyboard_help.py     # shortcut reference
      export_preview.py    # export JSON preview + save
'''

from __future__ import annotations

__all__ = ["__version__", "run_app"]

__version__ = "0.1.0"


def run_app(data_root=None) -> int:
    # Qt is imported on first use so the core modules stay importable headless.
    from .app import run_app as _run_app
    return _run_app(data_root)
