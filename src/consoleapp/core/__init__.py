"""
Core lifecycle functionality for consoleapp.

This package contains the base class every console app extends.
"""

from colorama import init

# Initialize colorama; strips colour codes when stderr is redirected
init(autoreset=True)

from .app import AppState, ConsoleApp, derive_app_name

__all__ = ['AppState', 'ConsoleApp', 'derive_app_name']
