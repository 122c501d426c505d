"""Project graph: data model, naming, target assembly and edge mapping."""
