"""Transcript Player — audio playback with a synchronized transcript.

WHY: A word-level transcript is only useful while listening if the line
being spoken is highlighted as the audio plays. This package turns the
provider's flat word list into display lines and keeps an active-line
index in step with a playback clock.

HOW: Three core pieces plus collaborators:
  core.segmenter   — words → fixed-size lines (computed once per transcript)
  core.locator     — (time, lines) → active line index (every tick)
  player.controller — playback state machine, the only source of time
Around them: api (Groq Whisper client), core.credentials (API key
storage), session (the consuming layer), cli and server (front ends).

RULES:
- Data flows one way: words → lines → (lines, time) → active index
- PlaybackState is owned by PlaybackController; everyone else reads snapshots
- The provider credential is passed explicitly into the provider call path
"""

__version__ = "0.1.0"
