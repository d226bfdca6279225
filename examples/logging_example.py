"""Demonstrates how to enable and configure logging in id3kit.

id3kit logging is disabled by default. Users opt in by calling ``enable_logging()``,
which returns a ``LoggingHandle``. The handle can be used as a context manager
(``with enable_logging(): ...``) or disabled manually via ``handle.disable()``.
When the last active handle is disabled, id3kit logging is automatically turned off.

Key concepts shown here:

- ``level``: the custom ``FIT`` level (numeric value 25, between INFO and WARNING)
  marks discretization and training calls and is the default. ``DEBUG`` adds
  per-column layout fitting and per-node split selection.
- ``log_format``: ``"short"`` shows ``timestamp | level | function - message``;
  ``"full"`` adds the module and line number.
- Defaults can also come from ``ID3KIT_LOG_LEVEL`` and ``ID3KIT_LOG_FORMAT``.
- Error logging: an unseen category in held-out data is logged as a warning
  before ``UnknownCategoryError`` propagates.
"""

import polars as pl

from id3kit import UnknownCategoryError, build_id3_result, enable_logging

train_df = pl.DataFrame({
    "outlook": ["sunny", "sunny", "overcast", "rain", "rain", "rain", "overcast", "sunny", "sunny", "rain"],
    "humidity": [85.0, 90.0, 78.0, 96.0, 80.0, 70.0, 65.0, 95.0, 70.0, 80.0],
    "windy": [False, True, False, False, False, True, True, False, False, False],
    "play": ["no", "no", "yes", "yes", "yes", "no", "yes", "no", "yes", "yes"],
})
test_df = pl.DataFrame({
    "outlook": ["sunny", "overcast", "rain"],
    "humidity": [75.0, 88.0, 91.0],
    "windy": [True, True, True],
    "play": ["yes", "yes", "no"],
})

with enable_logging(level="DEBUG", log_format="full"):
    result = build_id3_result(train_df, "play", test_df=test_df)

    print(f"\nDepth {result.depth}, {result.leaf_count} leaves, metrics {result.metrics}\n")
    for rule in result.rules:
        print(f"  {rule}  (samples={rule.samples}, confidence={rule.confidence})")

    # Unseen category: logged as a warning, then raised
    try:
        build_id3_result(train_df, "play", test_df=test_df.with_columns(pl.lit("fog").alias("outlook")))
    except UnknownCategoryError as exc:
        print(f"\nCaught: {exc}\n")

# Logging is disabled again here
build_id3_result(train_df, "play")
