"""GitHub repository search and result summaries."""