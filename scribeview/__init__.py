"""
Scribeview - transcript viewer and editor.

Turns an audio recording into a cleaned, titled transcript through a
four-stage pipeline: speech-to-text → text formatting → title generation →
persistence, and renders the transcript as styled blocks or raw markup.
"""

__version__ = "0.1.0"
