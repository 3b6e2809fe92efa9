DEFAULTS = {
    # Number of chunks a vector is split into for PQ8/PQ4
    "PQ_SUBVECTORS": 8,
    # Codebook entries per subvector for PQ8 (8-bit codes)
    "PQ8_CENTROIDS": 256,
    # Codebook entries per subvector for PQ4 (4-bit codes)
    "PQ4_CENTROIDS": 16,
    # Seed for the code vectors of chunks too long for a lattice codebook
    "PQ_CODEBOOK_SEED": 0,
    # Access frequency above which vectors stay at full precision
    "POLICY_HOT_THRESHOLD": 0.8,
    # Access frequency above which vectors are stored as half floats
    "POLICY_WARM_THRESHOLD": 0.4,
    # Access frequency above which vectors use PQ8
    "POLICY_COOL_THRESHOLD": 0.1,
    # Access frequency above which vectors use PQ4 (otherwise binary)
    "POLICY_COLD_THRESHOLD": 0.01,
    # Default number of results for soft top-k search
    "SEARCH_DEFAULT_K": 5,
    # Default softmax temperature for soft top-k search
    "SEARCH_DEFAULT_TEMPERATURE": 1.0,
    # Similarity used by search: cosine | dot
    "SEARCH_METRIC": "cosine",
    # Seed used to initialize attention layer parameters
    "LAYER_SEED": 0,
}
