"""Per-group picture folders and a daily draw."""