import freezegun

# freezegun skips modules whose names start with "gi" (PyGObject) by default,
# which also matches giglist; keep the rest of its default ignore list.
freezegun.configure(default_ignore_list=[
    "nose.plugins",
    "six.moves",
    "django.utils.six.moves",
    "google.gax",
    "threading",
    "multiprocessing",
    "queue",
    "selenium",
    "_pytest.terminal.",
    "_pytest.runner.",
    "gi.",
    "prompt_toolkit",
])
