PACKAGE_VERSION = '0.1.0'                          # version of the client package
PACKAGE_DATE = '2023-06-01T12:00:00.000000+00:00'  # official timestamp for client package
