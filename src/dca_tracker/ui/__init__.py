"""Display helpers for DCA Tracker: value colors, number formatting, text report."""

__all__ = ["render_report"]


def __getattr__(name: str):
    """Lazy-load render_report so ui.utils can be imported on its own."""
    if name == "render_report":
        from dca_tracker.ui.report import render_report
        return render_report
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
