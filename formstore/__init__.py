"""
Contact-form submission storage.

This package forwards contact-form submissions to a hosted Supabase
project, reads them back newest-first and exports them as a JSON file.
"""
