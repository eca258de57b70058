"""Application constants."""

# Fields of a workout that may be edited through debounced auto-save
AUTOSAVE_FIELDS = ("name", "date", "notes")

# Progress page: average weight is shown as a whole number
AVERAGE_WEIGHT_DIGITS = 0
