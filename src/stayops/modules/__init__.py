"""Screen managers, one package per app screen."""
