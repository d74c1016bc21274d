CLUSTER_SUMMARY_PROMPT = """Summarize the following text, capturing the key information and themes:

{content}"""
