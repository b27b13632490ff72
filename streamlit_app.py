# Entry point: streamlit run streamlit_app.py
from ui.main_content import run_main

run_main()
