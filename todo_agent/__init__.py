"""Todo agent — an LLM that plans requests as checklists and works through them."""
