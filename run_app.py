"""Run Streamlit app from project root. Use: python run_app.py"""
import os
import subprocess
import sys

root = os.path.dirname(os.path.abspath(__file__))
app_path = os.path.join(root, "resume_parser_ai", "app.py")
os.chdir(root)
subprocess.run([sys.executable, "-m", "streamlit", "run", app_path], check=True)
