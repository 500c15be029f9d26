"""Supabase client and flashcard store. Client is cached via Streamlit."""
import os

import streamlit as st
from dotenv import load_dotenv
from supabase import create_client, Client

from src.database import FlashcardStore

load_dotenv()


def _env_client() -> Client:
    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_KEY")
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")
    return create_client(url, key)


@st.cache_resource
def get_supabase() -> Client:
    return _env_client()


def get_supabase_uncached() -> Client:
    """For CLI/scripts (no Streamlit context)."""
    return _env_client()


def get_store() -> FlashcardStore:
    return FlashcardStore(get_supabase())


def get_store_uncached() -> FlashcardStore:
    return FlashcardStore(get_supabase_uncached())


def default_user_id() -> str:
    """Owner used when the app is not told otherwise (JEE_PREP_USER_ID)."""
    return os.environ.get("JEE_PREP_USER_ID", "")
