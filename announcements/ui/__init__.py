"""Streamlit front end for the scoring pipeline."""
