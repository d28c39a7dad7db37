"""Front ends for mtui."""
