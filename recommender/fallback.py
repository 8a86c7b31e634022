"""Static videos used when neither the recommendation service nor the catalog can fill a page."""

from typing import List

from .models import Video

FALLBACK_VIDEOS: List[Video] = [
    Video(
        id="fallback_1",
        title="Introduction to Machine Learning - Complete Guide",
        thumbnail_url="https://i.ytimg.com/vi/_19pRsZRiz4/hqdefault.jpg",
        description="Complete introduction to machine learning concepts and applications",
    ),
    Video(
        id="fallback_2",
        title="AI in Healthcare: Revolutionary Applications",
        thumbnail_url="https://i.ytimg.com/vi/ad79nYk2keg/hqdefault.jpg",
        description="Exploring how AI is transforming healthcare and medical diagnosis",
    ),
    Video(
        id="fallback_3",
        title="Deep Learning Fundamentals Explained",
        thumbnail_url="https://i.ytimg.com/vi/_19pRsZRiz4/hqdefault.jpg",
        description="Understanding the core concepts of deep learning and neural networks",
    ),
    Video(
        id="fallback_4",
        title="Data Science Projects for Beginners",
        thumbnail_url="https://i.ytimg.com/vi/ad79nYk2keg/hqdefault.jpg",
        description="Hands-on data science projects to build your portfolio",
    ),
]
