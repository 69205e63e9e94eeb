"""Compiled-in default content, used when no stored snapshot exists yet."""

from __future__ import annotations

from storehub.content.models import (
    GuestMessage,
    Memory,
    MemoryCategory,
    NewsCategory,
    NewsItem,
    TeamMember,
)


def _photo(slug: str) -> str:
    return f"https://picsum.photos/seed/x450-{slug}/600/600"


TEAM_MEMBERS: tuple[TeamMember, ...] = (
    TeamMember(
        id="1",
        name="RIZKY PRATAMA",
        role="CHIEF OF STORE",
        quote="Toko rapi, pelanggan happy!",
        image=_photo("rizky"),
    ),
    TeamMember(
        id="2",
        name="DEWI LESTARI",
        role="ASSISTANT CHIEF OF STORE",
        quote="Senyum dulu, baru melayani.",
        image=_photo("dewi"),
    ),
    TeamMember(
        id="3",
        name="AGUS SETIAWAN",
        role="MERCHANDISER",
        quote="Rak penuh, hati tenang.",
        image=_photo("agus"),
    ),
    TeamMember(
        id="4",
        name="SITI NURHALIZA",
        role="KASIR",
        quote="Semangat melayani!",
        image=_photo("siti"),
    ),
)

MEMORIES: tuple[Memory, ...] = (
    Memory(
        id="1",
        title="Grand Opening X450",
        description="Hari pertama toko dibuka, antrean sampai ke parkiran.",
        date="Januari 2023",
        category=MemoryCategory.EVENT,
        image=_photo("opening"),
    ),
    Memory(
        id="2",
        title="Store Terbaik Area",
        description="Penghargaan toko dengan penjualan tertinggi se-area Citaringgul.",
        date="Agustus 2023",
        category=MemoryCategory.ACHIEVEMENT,
        image=_photo("award"),
    ),
    Memory(
        id="3",
        title="Briefing Pagi",
        description="Rutinitas briefing sebelum toko buka.",
        date="Setiap hari",
        category=MemoryCategory.DAILY,
        image=_photo("briefing"),
    ),
)

NEWS_ITEMS: tuple[NewsItem, ...] = (
    NewsItem(
        id="1",
        title="Promo Gajian Akhir Bulan",
        summary="Diskon hingga 30% untuk produk kebutuhan rumah tangga pilihan.",
        content="Diskon hingga 30% untuk produk kebutuhan rumah tangga pilihan.",
        category=NewsCategory.PROMO,
        date="25 Mei 2024",
        image=_photo("promo"),
    ),
    NewsItem(
        id="2",
        title="Jam Operasional Baru",
        summary="Mulai bulan depan toko buka 24 jam setiap akhir pekan.",
        content="Mulai bulan depan toko buka 24 jam setiap akhir pekan.",
        category=NewsCategory.STORE_INFO,
        date="20 Mei 2024",
        image=_photo("hours"),
    ),
    NewsItem(
        id="3",
        title="Stock Opname Kuartal II",
        summary="Seluruh personil wajib hadir untuk stock opname hari Minggu.",
        content="Seluruh personil wajib hadir untuk stock opname hari Minggu.",
        category=NewsCategory.INTERNAL,
        date="15 Mei 2024",
        image=_photo("opname"),
    ),
)

GUEST_MESSAGES: tuple[GuestMessage, ...] = (
    GuestMessage(
        id="1",
        sender="Pak RT Mulyadi",
        content=(
            "Luar biasa pelayanannya. Toko Alfamart paling rapi di wilayah kita. "
            "Sukses terus!"
        ),
        timestamp="2 jam yang lalu",
    ),
)
