"""Core domain packages for hod (ids, fs, index, storage, config, tasks, services)."""
