"""Pipeline stages. Importing a module registers its stage."""
