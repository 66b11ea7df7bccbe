"""recordkit test suite.

Folder taxonomy
- unit/      : Isolated, fast checks of a single module/class/function.
- e2e/       : The ``recordkit`` command line driven through Click's CliRunner.
- fixtures/  : Shared record types (no tests here).

General guidance
- Keep unit tests fast and deterministic; no real I/O outside tmp paths.
- Property-based tests live with the layer they exercise and use @pytest.mark.property.
"""
