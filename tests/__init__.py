# =============================================================================
# tests/ - Test Suite
# =============================================================================
# - test_database.py: Connection guard (lazy connect, single-flight, liveness)
# - test_app.py: Request pipeline through the assembled app
# - test_config.py: Settings parsing
# - test_utils.py: Error types and URI redaction
#
# Run tests with: pytest
# =============================================================================
