"""A local picture library indexed by class, with difference hashes."""