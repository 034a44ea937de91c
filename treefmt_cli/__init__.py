"""
Treefmt CLI module.

Provides the `treefmt` console script (treefmt_cli.cli) and the build helper
used by CI (treefmt_cli.build_check). The helper runs before the project's
dependencies are installed, so this package must not import them eagerly.
"""
