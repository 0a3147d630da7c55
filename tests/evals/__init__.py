"""
EVALs Suite for pyrankcorrect - Tests Designed to Break the Library

Philosophy:
    These tests target degenerate inputs: anchor accuracy at or below chance,
    single-item rankings, a single respondent, the minimum number of draws
    and extreme utilities. Each eval documents how the library behaves at
    the edge rather than proving typical-case correctness.

Run tests:
    pytest tests/evals/ -v                    # Run all evals
    pytest tests/ --ignore=tests/evals/      # Run regular tests only
"""
