"""Productivity: notes, clipboard history, time tracking, pomodoro, QR codes."""
