"""
Bulk seeding for the restaurant directory.

Responsibilities:
- Read restaurant rows (name, cuisine, region) from a CSV file.
- Normalise them and drop rows without a usable name.
- Create each restaurant through the directory so cache-aside rules apply.
"""
