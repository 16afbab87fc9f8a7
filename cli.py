#!/usr/bin/env python
"""
IMS Assistant CLI entry point.

Usage:
    python cli.py chat <thread-id> "question"   # One-shot question
    python cli.py chat <thread-id>              # Interactive session
    python cli.py messages <thread-id>          # Show a conversation
    python cli.py history <thread-id>           # List checkpoints
    python cli.py tools                         # List tools
"""

from ims_assistant.cli.app import main

if __name__ == "__main__":
    main()
