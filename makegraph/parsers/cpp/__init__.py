"""C/C++ include scanners and the include-scan dependency strategy."""
