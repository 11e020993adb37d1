"""Pure provguard logic: models, placeholder rules, layout and run states.

Modules here perform no IO (no file access, subprocesses or clock reads).
"""
