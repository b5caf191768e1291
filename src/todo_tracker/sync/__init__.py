"""
Document sync.

Components:
- formats.py: line encodings (inline, comment)
- document.py: render / parse / diff of the whole checkbox document
- daemon.py: watcher + poll loop keeping the file and the backend in sync
"""
