"""Bank statement parsers, loaded by file path through core.load_parser_module."""
