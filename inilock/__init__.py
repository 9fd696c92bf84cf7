"""inilock — locked, atomic read-modify-write of shared INI files.

Several independent processes (shell scripts, PHP pages, Python tools) can
mutate the same INI file safely as long as they agree on the lock file
derived from the target path and replace the file atomically.
"""

__version__ = "1.0.0"
